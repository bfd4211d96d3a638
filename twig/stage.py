from typing import Any, Mapping

from twig.base import Manifest


class StagingArea:
    """
    Pending changes that are not yet committed to the active commit.

    Additions map a path to the blob id it should have in the next commit;
    removals name paths that should disappear from it. A path is never in
    both.
    """

    def __init__(
        self,
        additions: Mapping[str, str] | None = None,
        removals: set[str] | None = None,
    ) -> None:
        self.additions: Manifest = dict(additions or {})
        self.removals: set[str] = set(removals or ())

        overlap = self.additions.keys() & self.removals
        if overlap:
            raise ValueError(f"Paths both added and removed: {sorted(overlap)}")

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("StagingArea(...)")
        else:
            with p.group(4, "StagingArea(", ")"):
                p.breakable()
                p.text("additions=")
                p.pretty(self.additions)
                p.text(",")
                p.breakable()
                p.text("removals=")
                p.pretty(sorted(self.removals))
                p.breakable()

    def stage_addition(self, path: str, blob_id: str, tracked_id: str | None) -> None:
        """
        Stage ``path`` with content ``blob_id``.

        If the active commit already tracks the same content, any stale
        pending addition is dropped instead.
        """
        if tracked_id == blob_id:
            self.additions.pop(path, None)
        else:
            self.additions[path] = blob_id
        self.removals.discard(path)

    def stage_removal(self, path: str, tracked: bool) -> bool:
        """
        Unstage ``path`` and, if tracked, mark it for removal.

        Returns False when there was nothing to remove.
        """
        if path not in self.additions and not tracked:
            return False

        self.additions.pop(path, None)
        if tracked:
            self.removals.add(path)
        return True

    def snapshot(self) -> tuple[Manifest, set[str]]:
        return dict(self.additions), set(self.removals)

    def clear(self) -> None:
        self.additions.clear()
        self.removals.clear()

    def is_dirty(self) -> bool:
        return len(self.additions) > 0 or len(self.removals) > 0

    def freeze(self, manifest: Mapping[str, str]) -> Manifest:
        """Apply the pending changes to a copy of ``manifest``."""
        frozen = {**manifest, **self.additions}
        for path in self.removals:
            frozen.pop(path, None)
        return frozen
