from typing import Any

from twig.base import Head, Manifest, ObjectStore, RefStore, StageStore, WorkingTree
from twig.errors import NotFoundError, ObjectNotFoundError
from twig.objects import BLOB, hash_object
from twig.repo import Repository

MemoryRepoData = dict[str, Any]
MemoryFiles = dict[str, bytes]


def _init_repo_data(data: MemoryRepoData) -> MemoryRepoData:
    data.setdefault("objects", {})
    data.setdefault("branches", {})
    data.setdefault("head", None)
    data.setdefault("stage", {"additions": {}, "removals": []})
    return data


class MemoryObjectStore(ObjectStore):
    def __init__(self, repo_data: MemoryRepoData) -> None:
        self.objects: dict[str, tuple[str, bytes]] = repo_data["objects"]

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryObjectStore(...)")
        else:
            p.text(f"MemoryObjectStore(objects={len(self.objects)})")

    def put(self, data: bytes, kind: str = BLOB) -> str:
        object_id = hash_object(data, kind)
        if object_id not in self.objects:
            self.objects[object_id] = (kind, bytes(data))
        return object_id

    def get(self, object_id: str) -> bytes:
        if object_id not in self.objects:
            raise ObjectNotFoundError()
        return self.objects[object_id][1]

    def contains(self, object_id: str, kind: str | None = None) -> bool:
        if object_id not in self.objects:
            return False
        return kind is None or self.objects[object_id][0] == kind

    def list_ids(self, kind: str) -> list[str]:
        return sorted(
            object_id
            for object_id, (object_kind, _) in self.objects.items()
            if object_kind == kind
        )


class MemoryRefStore(RefStore):
    def __init__(self, repo_data: MemoryRepoData) -> None:
        self.repo = repo_data
        self.branches: dict[str, str] = repo_data["branches"]

    def get_head(self) -> Head | None:
        return self.repo["head"]

    def set_head(self, head: Head) -> None:
        self.repo["head"] = head

    def get_branch(self, name: str) -> str | None:
        return self.branches.get(name)

    def set_branch(self, name: str, commit_id: str) -> None:
        self.branches[name] = commit_id

    def list_branches(self) -> list[str]:
        return sorted(self.branches)

    def delete_branch(self, name: str) -> bool:
        return self.branches.pop(name, None) is not None


class MemoryStageStore(StageStore):
    def __init__(self, repo_data: MemoryRepoData) -> None:
        self.repo = repo_data

    def load(self) -> tuple[Manifest, set[str]]:
        stage = self.repo["stage"]
        return dict(stage["additions"]), set(stage["removals"])

    def save(self, additions: Manifest, removals: set[str]) -> None:
        self.repo["stage"] = {
            "additions": dict(additions),
            "removals": sorted(removals),
        }


class MemoryWorkingTree(WorkingTree):
    def __init__(self, files: MemoryFiles) -> None:
        self.files = files

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryWorkingTree(...)")
        else:
            with p.group(4, "MemoryWorkingTree(", ")"):
                p.breakable()
                p.text("files=")
                p.pretty(self.files)
                p.breakable()

    def list_files(self) -> set[str]:
        return set(self.files)

    def read_file(self, path: str) -> bytes:
        if path not in self.files:
            raise NotFoundError()
        return self.files[path]

    def write_file(self, path: str, data: bytes) -> None:
        self.files[path] = bytes(data)

    def delete_file(self, path: str) -> None:
        self.files.pop(path, None)

    def exists(self, path: str) -> bool:
        return path in self.files


def create_memory_repository(
    repo_data: MemoryRepoData | None = None,
    files: MemoryFiles | None = None,
) -> Repository:
    """
    Build a repository whose history and working tree live in plain dicts.

    Passing the same ``repo_data`` (and ``files``) again reopens the same
    repository.
    """
    data = _init_repo_data(repo_data if repo_data is not None else {})
    return Repository(
        objects=MemoryObjectStore(data),
        refs=MemoryRefStore(data),
        stage_store=MemoryStageStore(data),
        work_tree=MemoryWorkingTree(files if files is not None else {}),
    )
