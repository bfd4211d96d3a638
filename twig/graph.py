"""
Commit graph over an object store.

Commits form a DAG through their ordered parent lists. Ancestry here is
asymmetric: ``ancestor_chain`` follows first parents only,
while ``find_split_point`` walks every parent breadth-first. A merge
computes the candidate set with the former and searches it with the latter,
so a common ancestor reachable only through a second parent on the given
side can be missed.
"""

from collections import deque
from typing import Iterable, Iterator, Mapping

from loguru import logger

from twig.base import ObjectStore
from twig.errors import EmptyMessageError, NoSuchCommitError
from twig.objects import (
    COMMIT,
    ID_LENGTH,
    Commit,
    create_root_commit,
    now_timestamp,
)


class CommitGraph:
    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def create_commit(
        self,
        message: str,
        parents: Iterable[str],
        manifest: Mapping[str, str],
        timestamp: str | None = None,
    ) -> Commit:
        if not message:
            raise EmptyMessageError()

        commit = Commit(
            message=message,
            timestamp=timestamp or now_timestamp(),
            parents=tuple(parents),
            manifest=manifest,
        )
        self._save(commit)
        return commit

    def create_root(self) -> Commit:
        commit = create_root_commit()
        self._save(commit)
        return commit

    def _save(self, commit: Commit) -> None:
        commit_id = self.store.put(commit.to_bytes(), COMMIT)
        assert commit_id == commit.id
        logger.debug(f"Stored commit {commit.id[:7]}")

    def read(self, commit_id: str) -> Commit:
        if not self.store.contains(commit_id, COMMIT):
            raise NoSuchCommitError()
        return Commit.from_bytes(self.store.get(commit_id))

    def resolve(self, id_or_prefix: str) -> str:
        """
        Resolve a full commit id or an abbreviation of one.

        Any stored commit id containing the input matches; when several do,
        the lexicographically smallest wins.
        """
        if not id_or_prefix:
            raise NoSuchCommitError()

        full_length = len(id_or_prefix) == ID_LENGTH
        if full_length and self.store.contains(id_or_prefix, COMMIT):
            return id_or_prefix

        commit_ids = self.store.list_ids(COMMIT)
        matches = [commit_id for commit_id in commit_ids if id_or_prefix in commit_id]
        if not matches:
            raise NoSuchCommitError()
        return min(matches)

    def ancestor_chain(self, commit_id: str) -> list[str]:
        chain = [commit_id]
        parent = self.read(commit_id).first_parent
        while parent is not None:
            chain.append(parent)
            parent = self.read(parent).first_parent
        return chain

    def find_split_point(self, from_id: str, candidates: Iterable[str]) -> str | None:
        """
        Breadth-first search from ``from_id`` over all parent links.

        Returns the first visited ancestor that is in ``candidates``. The
        start commit itself is not tested.
        """
        targets = set(candidates)
        parents = self.read(from_id).parents
        marked = {from_id, *parents}
        fringe = deque(parents)

        while fringe:
            commit_id = fringe.popleft()
            if commit_id in targets:
                logger.debug(f"Split point of {from_id[:7]} is {commit_id[:7]}")
                return commit_id
            for parent in self.read(commit_id).parents:
                if parent not in marked:
                    marked.add(parent)
                    fringe.append(parent)

        return None

    def iter_history(self, commit_id: str) -> Iterator[Commit]:
        """Yield commits along the first-parent chain, newest first."""
        current: str | None = commit_id
        while current is not None:
            commit = self.read(current)
            yield commit
            current = commit.first_parent

    def all_commits(self) -> Iterator[Commit]:
        for commit_id in self.store.list_ids(COMMIT):
            yield Commit.from_bytes(self.store.get(commit_id))
