from dataclasses import dataclass

Blob = bytes
Manifest = dict[str, str]


@dataclass(frozen=True)
class Head:
    """
    Active position of the repository.

    Attached HEAD names a branch and follows it; detached HEAD names a
    commit directly.
    """

    branch: str | None = None
    commit_id: str | None = None

    def __post_init__(self) -> None:
        if (self.branch is None) == (self.commit_id is None):
            raise ValueError("Head must name exactly one of branch or commit_id")

    @property
    def is_detached(self) -> bool:
        return self.branch is None


class ObjectStore:
    """
    Content-addressed, write-once storage for blobs and commits.
    """

    def put(self, data: bytes, kind: str = "blob") -> str:
        """Store content unless already present and return its id."""
        raise NotImplementedError()

    def get(self, object_id: str) -> bytes:
        """Retrieve stored content, raising ObjectNotFoundError if absent."""
        raise NotImplementedError()

    def contains(self, object_id: str, kind: str | None = None) -> bool:
        """Check whether an object with this id (and kind, if given) is stored."""
        raise NotImplementedError()

    def list_ids(self, kind: str) -> list[str]:
        """List ids of all stored objects of a kind, sorted."""
        raise NotImplementedError()


class RefStore:
    """
    Branch pointers and HEAD.
    """

    def get_head(self) -> Head | None:
        """Current HEAD, or None for an uninitialized repository."""
        raise NotImplementedError()

    def set_head(self, head: Head) -> None:
        """Attach HEAD to a branch or detach it at a commit."""
        raise NotImplementedError()

    def get_branch(self, name: str) -> str | None:
        """Commit id a branch points to, or None if there is no such branch."""
        raise NotImplementedError()

    def set_branch(self, name: str, commit_id: str) -> None:
        """Create or move a branch."""
        raise NotImplementedError()

    def list_branches(self) -> list[str]:
        """List all branch names, sorted."""
        raise NotImplementedError()

    def delete_branch(self, name: str) -> bool:
        """Delete a branch, returning False if it did not exist."""
        raise NotImplementedError()

    def active_branch(self) -> str | None:
        head = self.get_head()
        if head is None:
            return None
        return head.branch

    def head_commit_id(self) -> str | None:
        head = self.get_head()
        if head is None:
            return None
        if head.is_detached:
            return head.commit_id
        assert head.branch is not None
        return self.get_branch(head.branch)

    def set_head_commit(self, commit_id: str) -> None:
        """Advance the active branch, or HEAD itself when detached."""
        head = self.get_head()
        if head is None or head.is_detached:
            self.set_head(Head(commit_id=commit_id))
        else:
            assert head.branch is not None
            self.set_branch(head.branch, commit_id)


class StageStore:
    """
    Persistence for the staging area between operations.
    """

    def load(self) -> tuple[Manifest, set[str]]:
        """Return pending additions and pending removals."""
        raise NotImplementedError()

    def save(self, additions: Manifest, removals: set[str]) -> None:
        """Replace the persisted staging area."""
        raise NotImplementedError()


class WorkingTree:
    """
    The user's files.
    """

    def list_files(self) -> set[str]:
        raise NotImplementedError()

    def read_file(self, path: str) -> bytes:
        """Read a file, raising NotFoundError if it does not exist."""
        raise NotImplementedError()

    def write_file(self, path: str, data: bytes) -> None:
        raise NotImplementedError()

    def delete_file(self, path: str) -> None:
        """Delete a file; deleting an absent file is not an error."""
        raise NotImplementedError()

    def exists(self, path: str) -> bool:
        return path in self.list_files()
