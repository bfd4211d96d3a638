from pathlib import Path
from typing import Any

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from twig.base import WorkingTree
from twig.config import TwigConfig
from twig.errors import NotFoundError
from twig.impl.sql import Base, create_sql_repository
from twig.repo import Repository


class FsWorkingTree(WorkingTree):
    """
    Plain files at the top level of a directory.

    Subdirectories, including the repository state directory, are not part
    of the tree.
    """

    def __init__(self, work_path: str | Path) -> None:
        self.work_path = Path(work_path).absolute()

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("FsWorkingTree(...)")
        else:
            p.text(f"FsWorkingTree(path={self.work_path})")

    def _file_path(self, path: str) -> Path:
        file_path = self.work_path / path
        if file_path.parent != self.work_path:
            raise NotFoundError()
        return file_path

    def list_files(self) -> set[str]:
        return {p.name for p in self.work_path.iterdir() if p.is_file()}

    def read_file(self, path: str) -> bytes:
        file_path = self._file_path(path)
        if not file_path.is_file():
            raise NotFoundError()
        return file_path.read_bytes()

    def write_file(self, path: str, data: bytes) -> None:
        self._file_path(path).write_bytes(data)

    def delete_file(self, path: str) -> None:
        self._file_path(path).unlink(missing_ok=True)

    def exists(self, path: str) -> bool:
        return self._file_path(path).is_file()


def open_repository(
    work_path: str | Path, config: TwigConfig | None = None
) -> Repository:
    """
    Open the repository rooted at ``work_path``.

    The state directory and database are created on first use; whether the
    repository has been initialized is up to ``Repository.init``.
    """
    config = config or TwigConfig()
    work_path = Path(work_path).absolute()

    config.state_dir(work_path).mkdir(parents=True, exist_ok=True)
    engine = create_engine(config.database_url(work_path), echo=config.echo_sql)
    Base.metadata.create_all(engine)
    logger.debug(f"Opened repository state at {config.state_dir(work_path)}")

    SessionLocal = sessionmaker(bind=engine)
    return create_sql_repository(SessionLocal, FsWorkingTree(work_path))


def is_repository(work_path: str | Path, config: TwigConfig | None = None) -> bool:
    config = config or TwigConfig()
    state_dir = config.state_dir(Path(work_path).absolute())
    return (state_dir / config.database_name).is_file()
