"""Human-readable and JSON renderings of a SearchResult."""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict

from .models import SearchResult


def format_search_summary(result: SearchResult) -> str:
    """Format a short summary of a finished search."""
    summary = result.summary
    lines = ["Duplicate File Search", "", f"Root: {result.root}"]

    directories = int(summary.get("directories_visited", 0))
    files_hashed = int(summary.get("files_hashed", 0))
    if files_hashed == 0 and not result.issues:
        lines.append(f"Directories visited: {directories}")
        lines.append("No files to analyze.")
        return "\n".join(lines)

    lines.append(f"Directories visited: {directories}")
    lines.append(f"Files hashed: {files_hashed}")
    lines.append(f"Unique contents: {int(summary.get('unique_files', 0))}")
    lines.append("")

    if result.duplicates:
        lines.append(f"⚠ Found {result.duplicate_count} duplicate files")
    else:
        lines.append("✓ No duplicate files found!")

    if result.issues:
        counts = Counter(issue.code for issue in result.issues)
        lines.append("")
        lines.append(f"Issues: {len(result.issues)}")
        for code, count in sorted(counts.items()):
            lines.append(f"  {code}: {count}")

    return "\n".join(lines)


def format_search_details(result: SearchResult, *, max_paths: int = 50, max_issues: int = 20) -> str:
    """Format the summary followed by the duplicate paths and issues, truncated."""
    lines = [format_search_summary(result)]

    if result.duplicates:
        lines.append("")
        lines.append("Duplicate files")
        for path in result.duplicates[:max_paths]:
            lines.append(f"  • {path}")
        if len(result.duplicates) > max_paths:
            lines.append(f"  ...and {len(result.duplicates) - max_paths} more files")

    if result.issues:
        lines.append("")
        lines.append("Skipped")
        for issue in result.issues[:max_issues]:
            lines.append(f"  • {issue.path} [{issue.code}] {issue.message}")
        if len(result.issues) > max_issues:
            lines.append(f"  ...and {len(result.issues) - max_issues} more issues")

    return "\n".join(lines)


def export_search_json(result: SearchResult) -> Dict[str, Any]:
    """Export a search result as a JSON-serializable dict."""
    return {
        "root": result.root,
        "summary": {
            "directories_visited": int(result.summary.get("directories_visited", 0)),
            "files_hashed": int(result.summary.get("files_hashed", 0)),
            "unique_files": int(result.summary.get("unique_files", 0)),
            "duplicate_files": result.duplicate_count,
            "hash_failures": int(result.summary.get("hash_failures", 0)),
            "branches_skipped": int(result.summary.get("branches_skipped", 0)),
            "issues_count": len(result.issues),
        },
        "duplicates": list(result.duplicates),
        "issues": [
            {"path": issue.path, "code": issue.code, "message": issue.message}
            for issue in result.issues
        ],
    }
