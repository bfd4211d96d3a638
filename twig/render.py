"""
Text rendering for log and status output.
"""

from datetime import datetime
from typing import Iterable

from twig.objects import Commit
from twig.repo import StatusReport

DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


def format_date(timestamp: str) -> str:
    return datetime.fromisoformat(timestamp).strftime(DATE_FORMAT)


def format_commit(commit: Commit) -> str:
    lines = ["===", f"commit {commit.id}"]
    if commit.is_merge:
        lines.append(f"Merge: {commit.parents[0][:7]} {commit.parents[1][:7]}")
    lines.append(f"Date: {format_date(commit.timestamp)}")
    lines.append(commit.message)
    return "\n".join(lines) + "\n"


def format_log(commits: Iterable[Commit]) -> str:
    return "\n".join(format_commit(commit) for commit in commits)


def _section(title: str, entries: Iterable[str]) -> list[str]:
    return [f"=== {title} ===", *entries, ""]


def format_status(report: StatusReport) -> str:
    branches = []
    if report.active_branch is not None:
        branches.append(f"*{report.active_branch}")
    branches.extend(b for b in report.branches if b != report.active_branch)

    lines = [
        *_section("Branches", branches),
        *_section("Staged Files", report.staged),
        *_section("Removed Files", report.removed),
        *_section("Modifications Not Staged For Commit", report.modified),
        *_section("Untracked Files", report.untracked),
    ]
    return "\n".join(lines)
