"""
Object model: content hashing and the commit record.

Every object is addressed by the SHA-1 of a ``"<kind> <length>\\0"`` header
followed by its content, so a blob and a commit with identical bytes never
share an id.
"""

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping

from twig.base import Manifest

BLOB = "blob"
COMMIT = "commit"

ID_LENGTH = 40

EPOCH_TIMESTAMP = datetime.fromtimestamp(0, tz=timezone.utc).isoformat()
INITIAL_MESSAGE = "initial commit"


def hash_object(data: bytes, kind: str = BLOB) -> str:
    header = f"{kind} {len(data)}\0".encode()
    return hashlib.sha1(header + data).hexdigest()


def now_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Commit:
    """
    Immutable snapshot record.

    Attributes:
        message: Commit message
        timestamp: ISO-8601 UTC creation time
        parents: Parent ids; parents[0] is the mainline parent
        manifest: Complete mapping of tracked path to blob id
        id: Hash of the serialized fields, computed once
    """

    message: str
    timestamp: str
    parents: tuple[str, ...] = ()
    manifest: Mapping[str, str] = field(default_factory=dict)
    id: str = field(init=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parents", tuple(self.parents))
        object.__setattr__(self, "manifest", MappingProxyType(dict(self.manifest)))
        object.__setattr__(self, "id", hash_object(self.to_bytes(), COMMIT))

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Commit(...)")
        else:
            with p.group(4, "Commit(", ")"):
                p.breakable()
                p.text(f"id='{self.id[:7]}',")
                p.breakable()
                p.text(f"message={self.message!r},")
                p.breakable()
                p.text(f"parents={[parent[:7] for parent in self.parents]},")
                p.breakable()
                p.text("manifest=")
                p.pretty(dict(self.manifest))
                p.breakable()

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def first_parent(self) -> str | None:
        return self.parents[0] if self.parents else None

    def tracked(self) -> Manifest:
        """Return an owned, mutable copy of the manifest."""
        return dict(self.manifest)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "timestamp": self.timestamp,
            "parents": list(self.parents),
            "manifest": dict(self.manifest),
        }

    def to_bytes(self) -> bytes:
        return json.dumps(
            self.to_dict(), sort_keys=True, separators=(",", ":")
        ).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "Commit":
        raw = json.loads(data.decode("utf-8"))
        return cls(
            message=raw["message"],
            timestamp=raw["timestamp"],
            parents=tuple(raw["parents"]),
            manifest=raw["manifest"],
        )


def create_root_commit() -> Commit:
    return Commit(message=INITIAL_MESSAGE, timestamp=EPOCH_TIMESTAMP)
