from typing import Callable

from sqlalchemy import ForeignKey, LargeBinary, String, delete, insert, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from twig.base import Head, Manifest, ObjectStore, RefStore, StageStore, WorkingTree
from twig.errors import ObjectNotFoundError
from twig.objects import BLOB, ID_LENGTH, hash_object
from twig.repo import Repository

HEAD_ROW_ID = 1


class Base(DeclarativeBase):
    pass


class ObjectModel(Base):
    __tablename__ = "objects"
    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    kind: Mapped[str] = mapped_column(String(16), index=True)
    content: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)


class BranchModel(Base):
    __tablename__ = "branches"
    name: Mapped[str] = mapped_column(primary_key=True)
    commit_id: Mapped[str] = mapped_column(ForeignKey("objects.id"))


class HeadModel(Base):
    __tablename__ = "head"
    id: Mapped[int] = mapped_column(primary_key=True)
    branch: Mapped[str | None] = mapped_column(nullable=True)
    commit_id: Mapped[str | None] = mapped_column(
        ForeignKey("objects.id"), nullable=True
    )


class StageEntryModel(Base):
    __tablename__ = "stage_entries"
    path: Mapped[str] = mapped_column(primary_key=True)
    # NULL marks a pending removal
    blob_id: Mapped[str | None] = mapped_column(
        ForeignKey("objects.id"), nullable=True
    )


class SqlObjectStore(ObjectStore):
    def __init__(self, session_maker: Callable[[], Session]) -> None:
        self.session_maker = session_maker

    def put(self, data: bytes, kind: str = BLOB) -> str:
        object_id = hash_object(data, kind)
        with self.session_maker() as session:
            existing = session.get(ObjectModel, object_id)
            if existing is None:
                session.add(ObjectModel(id=object_id, kind=kind, content=data))
                session.commit()
        return object_id

    def get(self, object_id: str) -> bytes:
        with self.session_maker() as session:
            item = session.get(ObjectModel, object_id)
            if item is None:
                raise ObjectNotFoundError()
            return item.content

    def contains(self, object_id: str, kind: str | None = None) -> bool:
        stmt = select(ObjectModel.kind).where(ObjectModel.id == object_id)
        with self.session_maker() as session:
            stored_kind = session.execute(stmt).scalar_one_or_none()
        if stored_kind is None:
            return False
        return kind is None or stored_kind == kind

    def list_ids(self, kind: str) -> list[str]:
        stmt = (
            select(ObjectModel.id)
            .where(ObjectModel.kind == kind)
            .order_by(ObjectModel.id)
        )
        with self.session_maker() as session:
            return list(session.execute(stmt).scalars().all())


class SqlRefStore(RefStore):
    def __init__(self, session_maker: Callable[[], Session]) -> None:
        self.session_maker = session_maker

    def get_head(self) -> Head | None:
        with self.session_maker() as session:
            row = session.get(HeadModel, HEAD_ROW_ID)
            if row is None:
                return None
            return Head(branch=row.branch, commit_id=row.commit_id)

    def set_head(self, head: Head) -> None:
        with self.session_maker() as session:
            row = session.get(HeadModel, HEAD_ROW_ID)
            if row is None:
                row = HeadModel(id=HEAD_ROW_ID)
            row.branch = head.branch
            row.commit_id = head.commit_id
            session.add(row)
            session.commit()

    def get_branch(self, name: str) -> str | None:
        with self.session_maker() as session:
            branch_model = session.get(BranchModel, name)
            return branch_model.commit_id if branch_model else None

    def set_branch(self, name: str, commit_id: str) -> None:
        with self.session_maker() as session:
            branch_model = session.get(BranchModel, name)
            if branch_model:
                branch_model.commit_id = commit_id
            else:
                branch_model = BranchModel(name=name, commit_id=commit_id)
            session.add(branch_model)
            session.commit()

    def list_branches(self) -> list[str]:
        stmt = select(BranchModel.name).order_by(BranchModel.name)
        with self.session_maker() as session:
            return list(session.execute(stmt).scalars().all())

    def delete_branch(self, name: str) -> bool:
        with self.session_maker() as session:
            stmt = delete(BranchModel).where(BranchModel.name == name)
            result = session.execute(stmt)
            session.commit()
            return result.rowcount > 0


class SqlStageStore(StageStore):
    def __init__(self, session_maker: Callable[[], Session]) -> None:
        self.session_maker = session_maker

    def load(self) -> tuple[Manifest, set[str]]:
        additions: Manifest = {}
        removals: set[str] = set()
        with self.session_maker() as session:
            for entry in session.execute(select(StageEntryModel)).scalars():
                if entry.blob_id is None:
                    removals.add(entry.path)
                else:
                    additions[entry.path] = entry.blob_id
        return additions, removals

    def save(self, additions: Manifest, removals: set[str]) -> None:
        rows = [
            {"path": path, "blob_id": blob_id} for path, blob_id in additions.items()
        ]
        rows.extend({"path": path, "blob_id": None} for path in removals)

        with self.session_maker() as session:
            session.execute(delete(StageEntryModel))
            if rows:
                session.execute(insert(StageEntryModel), rows)
            session.commit()


def create_sql_repository(
    session_maker: Callable[[], Session], work_tree: WorkingTree
) -> Repository:
    return Repository(
        objects=SqlObjectStore(session_maker),
        refs=SqlRefStore(session_maker),
        stage_store=SqlStageStore(session_maker),
        work_tree=work_tree,
    )
