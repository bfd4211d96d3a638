"""
Three-way merge decisions.

For each path in the union of the split-point (S), current (C) and given (G)
manifests, ``decide`` picks what the merge does with the working copy. The
rules are checked in order; the first match wins.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from twig.objects import Commit

CONFLICT_START = b"<<<<<<< HEAD\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_END = b">>>>>>>\n"


class MergeAction(str, Enum):
    """What a merge does with one path."""

    KEEP = "keep"
    TAKE_GIVEN = "take_given"
    REMOVE = "remove"
    CONFLICT = "conflict"


def decide(split: str | None, current: str | None, given: str | None) -> MergeAction:
    """
    Decide one path from its blob ids in S, C and G (None when absent).
    """
    if split is None and given is None and current is not None:
        return MergeAction.KEEP
    if split is None and current is None and given is not None:
        return MergeAction.TAKE_GIVEN
    if current is None and given is None:
        return MergeAction.KEEP

    if split is not None:
        # Removed on the given side, untouched here
        if split == current and given is None:
            return MergeAction.REMOVE
        if split == given and current is None:
            return MergeAction.KEEP
        if split == current and split != given:
            return MergeAction.TAKE_GIVEN
        if split == given and split != current:
            return MergeAction.KEEP

    if current is not None and given is not None and current == given:
        return MergeAction.KEEP

    return MergeAction.CONFLICT


def plan_merge(
    split: Mapping[str, str],
    current: Mapping[str, str],
    given: Mapping[str, str],
) -> dict[str, MergeAction]:
    """Decide every path, omitting those the merge leaves alone."""
    plan: dict[str, MergeAction] = {}
    for path in sorted(split.keys() | current.keys() | given.keys()):
        action = decide(split.get(path), current.get(path), given.get(path))
        if action is not MergeAction.KEEP:
            plan[path] = action
    return plan


def conflict_content(current: bytes | None, given: bytes | None) -> bytes:
    return (
        CONFLICT_START
        + (current or b"")
        + CONFLICT_SEPARATOR
        + (given or b"")
        + CONFLICT_END
    )


@dataclass
class MergeResult:
    """
    Outcome of a merge that ran to completion.

    ``commit`` is None for a fast-forward, which creates no commit.
    """

    given_commit_id: str
    commit: Commit | None = None
    fast_forward: bool = False
    conflicts: list[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicts) > 0
