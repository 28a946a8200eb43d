from __future__ import annotations


class ScanError(Exception):
    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class InvalidInputError(ScanError):
    pass


class CycleDetectedError(ScanError):
    pass


class SearchCancelledError(ScanError):
    pass
