"""
Repository operations.

``Repository`` composes an object store, a ref store, a stage store and a
working tree into the user-facing operations. Every operation validates
before it mutates anything, and refs and the staging area are written as
its last step.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator

from loguru import logger

from twig.base import Head, ObjectStore, RefStore, StageStore, WorkingTree
from twig.errors import (
    AlreadyUpToDateError,
    BranchExistsError,
    BranchNotFoundError,
    CurrentBranchError,
    EmptyMessageError,
    FileNotInCommitError,
    NoChangesError,
    NoSuchCommitError,
    NotFoundError,
    NothingToRemoveError,
    NotInitializedError,
    RepositoryExistsError,
    SelfMergeError,
    UncommittedChangesError,
    UntrackedFileError,
)
from twig.graph import CommitGraph
from twig.merge import MergeAction, MergeResult, conflict_content, plan_merge
from twig.objects import BLOB, Commit, hash_object
from twig.stage import StagingArea

DEFAULT_BRANCH = "master"


@dataclass
class StatusReport:
    active_branch: str | None
    branches: list[str] = field(default_factory=list)
    staged: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)


class Repository:
    """
    A single-user repository over pluggable storage.

    The staging area is loaded from ``stage_store`` at the start of each
    operation and passed explicitly through it; nothing is cached between
    calls, so two ``Repository`` objects over the same stores see the same
    state.
    """

    def __init__(
        self,
        objects: ObjectStore,
        refs: RefStore,
        stage_store: StageStore,
        work_tree: WorkingTree,
    ) -> None:
        self.objects = objects
        self.refs = refs
        self.stage_store = stage_store
        self.work_tree = work_tree
        self.graph = CommitGraph(objects)

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Repository(...)")
        elif not self.is_initialized():
            p.text("Repository(uninitialized)")
        else:
            head = self.refs.get_head()
            with p.group(4, "Repository(", ")"):
                p.breakable()
                p.text(f"head={head},")
                p.breakable()
                p.text("commit=")
                p.pretty(self.head_commit())
                p.text(",")
                p.breakable()
                p.text("stage=")
                p.pretty(self._load_stage())
                p.breakable()

    # Plumbing

    def is_initialized(self) -> bool:
        return self.refs.get_head() is not None

    def _require_initialized(self) -> None:
        if not self.is_initialized():
            raise NotInitializedError()

    def _load_stage(self) -> StagingArea:
        additions, removals = self.stage_store.load()
        return StagingArea(additions, removals)

    def _save_stage(self, stage: StagingArea) -> None:
        additions, removals = stage.snapshot()
        self.stage_store.save(additions, removals)

    def head_commit(self) -> Commit:
        self._require_initialized()
        commit_id = self.refs.head_commit_id()
        if commit_id is None:
            raise NoSuchCommitError()
        return self.graph.read(commit_id)

    def staging_area(self) -> StagingArea:
        """Return a copy of the persisted staging area."""
        self._require_initialized()
        return self._load_stage()

    def _untracked_files(self, head: Commit, stage: StagingArea) -> list[str]:
        return sorted(
            path
            for path in self.work_tree.list_files()
            if path not in head.manifest and path not in stage.additions
        )

    def _check_untracked(self, head: Commit, stage: StagingArea) -> None:
        if self._untracked_files(head, stage):
            raise UntrackedFileError()

    def _replace_tree(self, head: Commit, stage: StagingArea, target: Commit) -> None:
        for path in set(head.manifest) | set(stage.additions):
            self.work_tree.delete_file(path)
        for path, blob_id in target.manifest.items():
            self.work_tree.write_file(path, self.objects.get(blob_id))

    def _commit(self, message: str, stage: StagingArea, parents: list[str]) -> Commit:
        head = self.graph.read(parents[0])
        manifest = stage.freeze(head.manifest)
        commit = self.graph.create_commit(message, parents, manifest)
        self.refs.set_head_commit(commit.id)
        stage.clear()
        self._save_stage(stage)
        return commit

    # Porcelain

    def init(self, default_branch: str = DEFAULT_BRANCH) -> Commit:
        if self.is_initialized():
            raise RepositoryExistsError()

        root = self.graph.create_root()
        self.refs.set_branch(default_branch, root.id)
        self.refs.set_head(Head(branch=default_branch))
        self._save_stage(StagingArea())

        logger.info(f"Initialized repository on '{default_branch}' at {root.id[:7]}")
        return root

    def add(self, path: str) -> None:
        self._require_initialized()
        if not self.work_tree.exists(path):
            raise NotFoundError()

        content = self.work_tree.read_file(path)
        head = self.head_commit()
        stage = self._load_stage()

        blob_id = hash_object(content, BLOB)
        tracked_id = head.manifest.get(path)
        if blob_id != tracked_id:
            self.objects.put(content, BLOB)

        stage.stage_addition(path, blob_id, tracked_id)
        self._save_stage(stage)

    def rm(self, path: str) -> None:
        self._require_initialized()
        head = self.head_commit()
        stage = self._load_stage()

        tracked = path in head.manifest
        if not stage.stage_removal(path, tracked):
            raise NothingToRemoveError()

        self._save_stage(stage)
        if tracked:
            self.work_tree.delete_file(path)

    def commit(self, message: str) -> Commit:
        self._require_initialized()
        if not message:
            raise EmptyMessageError()

        stage = self._load_stage()
        if not stage.is_dirty():
            raise NoChangesError()

        commit = self._commit(message, stage, [self.head_commit().id])
        logger.info(f"Committed {commit.id[:7]}: {message}")
        return commit

    def log(self) -> Iterator[Commit]:
        return self.graph.iter_history(self.head_commit().id)

    def global_log(self) -> Iterator[Commit]:
        self._require_initialized()
        return self.graph.all_commits()

    def find(self, message: str) -> list[str]:
        self._require_initialized()
        found = [
            commit.id
            for commit in self.graph.all_commits()
            if commit.message == message
        ]
        if not found:
            raise NotFoundError("Found no commit with that message.")
        return found

    def status(self) -> StatusReport:
        head = self.head_commit()
        stage = self._load_stage()
        files = self.work_tree.list_files()

        modified = []
        for path, blob_id in stage.additions.items():
            if path not in files:
                modified.append(f"{path} (deleted)")
            elif hash_object(self.work_tree.read_file(path)) != blob_id:
                modified.append(f"{path} (modified)")
        for path, blob_id in head.manifest.items():
            if path in files:
                if (
                    path not in stage.additions
                    and hash_object(self.work_tree.read_file(path)) != blob_id
                ):
                    modified.append(f"{path} (modified)")
            elif path not in stage.removals:
                modified.append(f"{path} (deleted)")

        return StatusReport(
            active_branch=self.refs.active_branch(),
            branches=self.refs.list_branches(),
            staged=sorted(stage.additions),
            removed=sorted(stage.removals),
            modified=sorted(modified),
            untracked=self._untracked_files(head, stage),
        )

    def checkout_file(self, path: str, commit: str | None = None) -> None:
        """Restore one file from HEAD or from ``commit``, leaving staging alone."""
        if commit is None:
            source = self.head_commit()
        else:
            self._require_initialized()
            source = self.graph.read(self.graph.resolve(commit))

        blob_id = source.manifest.get(path)
        if blob_id is None:
            raise FileNotInCommitError()

        self.work_tree.write_file(path, self.objects.get(blob_id))

    def checkout_branch(self, name: str) -> None:
        self._require_initialized()
        commit_id = self.refs.get_branch(name)
        if commit_id is None:
            raise BranchNotFoundError("No such branch exists.")
        if name == self.refs.active_branch():
            raise CurrentBranchError("No need to checkout the current branch.")

        head = self.head_commit()
        stage = self._load_stage()
        self._check_untracked(head, stage)

        self._replace_tree(head, stage, self.graph.read(commit_id))
        self.refs.set_head(Head(branch=name))
        stage.clear()
        self._save_stage(stage)

        logger.info(f"Switched to branch '{name}'")

    def checkout_detached(self, commit: str) -> None:
        self._require_initialized()
        target = self.graph.read(self.graph.resolve(commit))

        head = self.head_commit()
        stage = self._load_stage()
        self._check_untracked(head, stage)

        self._replace_tree(head, stage, target)
        self.refs.set_head(Head(commit_id=target.id))
        stage.clear()
        self._save_stage(stage)

        logger.warning(f"HEAD is now detached at {target.id[:7]}")

    def branch(self, name: str) -> None:
        head = self.head_commit()
        if self.refs.get_branch(name) is not None:
            raise BranchExistsError()

        self.refs.set_branch(name, head.id)
        logger.info(f"Created branch '{name}' at {head.id[:7]}")

    def rm_branch(self, name: str) -> None:
        self._require_initialized()
        if self.refs.get_branch(name) is None:
            raise BranchNotFoundError()
        if name == self.refs.active_branch():
            raise CurrentBranchError()

        self.refs.delete_branch(name)
        logger.info(f"Deleted branch '{name}'")

    def reset(self, commit: str) -> None:
        self._require_initialized()
        target = self.graph.read(self.graph.resolve(commit))

        head = self.head_commit()
        stage = self._load_stage()
        self._check_untracked(head, stage)

        self._replace_tree(head, stage, target)
        self.refs.set_head_commit(target.id)
        stage.clear()
        self._save_stage(stage)

        logger.info(f"Reset to {target.id[:7]}")

    def merge(self, branch: str) -> MergeResult:
        """
        Merge ``branch`` into the active branch.

        Conflicting files are written with conflict markers and staged, and
        the merge commit is still created.
        """
        head = self.head_commit()
        stage = self._load_stage()

        self._check_untracked(head, stage)
        if stage.is_dirty():
            raise UncommittedChangesError()

        given_id = self.refs.get_branch(branch)
        if given_id is None:
            raise BranchNotFoundError()

        current_branch = self.refs.active_branch()
        if branch == current_branch:
            raise SelfMergeError()

        given_chain = self.graph.ancestor_chain(given_id)
        if head.id in given_chain:
            self._replace_tree(head, stage, self.graph.read(given_id))
            self.refs.set_head_commit(given_id)
            stage.clear()
            self._save_stage(stage)

            logger.info(f"Fast-forwarded to '{branch}' at {given_id[:7]}")
            return MergeResult(given_commit_id=given_id, fast_forward=True)

        split_id = self.graph.find_split_point(head.id, given_chain)
        if split_id is None:
            raise NoSuchCommitError("No common ancestor with that branch.")
        if split_id == given_id:
            raise AlreadyUpToDateError()

        split = self.graph.read(split_id)
        given = self.graph.read(given_id)
        conflicts = []

        plan = plan_merge(split.manifest, head.manifest, given.manifest)
        for path, action in plan.items():
            if action is MergeAction.TAKE_GIVEN:
                blob_id = given.manifest[path]
                self.work_tree.write_file(path, self.objects.get(blob_id))
                stage.stage_addition(path, blob_id, head.manifest.get(path))
            elif action is MergeAction.REMOVE:
                stage.stage_removal(path, tracked=True)
                self.work_tree.delete_file(path)
            elif action is MergeAction.CONFLICT:
                content = conflict_content(
                    self._blob_or_none(head.manifest.get(path)),
                    self._blob_or_none(given.manifest.get(path)),
                )
                blob_id = self.objects.put(content, BLOB)
                self.work_tree.write_file(path, content)
                stage.stage_addition(path, blob_id, head.manifest.get(path))
                conflicts.append(path)
                logger.warning(f"Merge conflict in {path}")

        message = f"Merged {branch} into {current_branch or 'HEAD'}."
        commit = self._commit(message, stage, [head.id, given_id])

        logger.info(
            f"Merged '{branch}' as {commit.id[:7]} with {len(conflicts)} conflict(s)"
        )
        return MergeResult(
            given_commit_id=given_id, commit=commit, conflicts=conflicts
        )

    def _blob_or_none(self, blob_id: str | None) -> bytes | None:
        if blob_id is None:
            return None
        return self.objects.get(blob_id)
