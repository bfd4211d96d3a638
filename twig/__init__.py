from .base import Blob, Head, Manifest, ObjectStore, RefStore, StageStore, WorkingTree
from .config import TwigConfig
from .errors import TwigError
from .graph import CommitGraph
from .impl.fs import FsWorkingTree, open_repository
from .impl.memory import create_memory_repository
from .merge import MergeAction, MergeResult
from .objects import Commit
from .repo import Repository, StatusReport
from .stage import StagingArea

__all__ = [
    "Blob",
    "Head",
    "Manifest",
    "ObjectStore",
    "RefStore",
    "StageStore",
    "WorkingTree",
    "TwigConfig",
    "TwigError",
    "CommitGraph",
    "FsWorkingTree",
    "open_repository",
    "create_memory_repository",
    "MergeAction",
    "MergeResult",
    "Commit",
    "Repository",
    "StatusReport",
    "StagingArea",
]
