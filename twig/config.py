"""
Configuration for twig repositories and the command line.
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


class TwigConfig(BaseModel):
    """Where repository state lives and how chatty the tool is."""

    repo_dir: str = Field(
        default=".twig", description="Directory holding repository state"
    )
    database_name: str = Field(
        default="twig.db", description="SQLite database file inside repo_dir"
    )
    default_branch: str = Field(
        default="master", description="Branch created by init"
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("TWIG_LOG_LEVEL", "WARNING"),
        description="Minimum level written to stderr",
    )
    echo_sql: bool = Field(
        default_factory=lambda: _env_flag("TWIG_ECHO_SQL"),
        description="Echo SQL statements issued by the storage backend",
    )

    def state_dir(self, work_dir: Path) -> Path:
        return work_dir / self.repo_dir

    def database_url(self, work_dir: Path) -> str:
        return f"sqlite:///{self.state_dir(work_dir) / self.database_name}"
