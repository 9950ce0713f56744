from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import inspect, text
from sqlmodel import Field, SQLModel, create_engine, Session

from . import config


class JobStatus(str, Enum):
    PENDING = "PENDING"
    READY = "READY"
    FAILED = "FAILED"


class TemplateRecord(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(index=True, unique=True)
    name: str
    kind: str = "badge"
    payload: str
    version: int = 1
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class PrintJob(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    job_key: str = Field(index=True)
    template_slug: str = Field(index=True)
    format: str = "A4"
    copies: int = 1
    options: str = "{}"
    context: str = "{}"
    status: JobStatus = Field(default=JobStatus.PENDING)
    page_count: Optional[int] = None
    fail_code: Optional[str] = None
    fail_detail: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Artifact(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    job_id: int = Field(foreign_key="printjob.id")
    type: str
    path: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)
    _migrate_db()


def _migrate_db() -> None:
    """Add columns introduced after a database was first created."""
    inspector = inspect(engine)
    if "printjob" not in inspector.get_table_names():
        return
    columns = {col["name"] for col in inspector.get_columns("printjob")}
    for name in ("page_count", "fail_code", "fail_detail"):
        if name not in columns:
            column_type = "INTEGER" if name == "page_count" else "TEXT"
            with engine.begin() as conn:
                conn.execute(text(f"ALTER TABLE printjob ADD COLUMN {name} {column_type}"))


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
