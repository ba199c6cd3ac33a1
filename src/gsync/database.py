"""SQLite persistence for the gsync configuration table."""
from __future__ import annotations

import os
import traceback
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional, Union

from sqlalchemy import Column, MetaData, Table, Text, create_engine
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Connection, Engine, RowMapping
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql.elements import TextClause

MEMORY = ":memory:"

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_THIS_FILE = os.path.abspath(__file__)

metadata = MetaData()

config_table = Table(
    "config",
    metadata,
    Column("client_id", Text, nullable=True),
    Column("client_secret", Text, nullable=True),
    Column("input_files", Text, nullable=True),
    Column("drive_id", Text, nullable=True),
)


@dataclass(frozen=True)
class SourceLocation:
    """Where a failing storage call was issued."""

    file: str
    line: int
    function: str

    def __str__(self) -> str:
        return f"{self.file}:{self.line} in {self.function}"


def _call_site(frames: List[traceback.FrameSummary]) -> SourceLocation:
    """Pick the innermost gsync frame outside this module, else the innermost gsync frame."""
    ours = [f for f in frames if os.path.abspath(f.filename).startswith(_PACKAGE_DIR + os.sep)]
    callers = [f for f in ours if os.path.abspath(f.filename) != _THIS_FILE]
    candidates = callers or ours or frames
    if not candidates:
        return SourceLocation("<unknown>", 0, "<unknown>")
    frame = candidates[-1]
    return SourceLocation(frame.filename, frame.lineno or 0, frame.name)


class DatabaseError(Exception):
    """Raised when a database operation fails."""

    def __init__(self, cause: Exception, location: SourceLocation):
        super().__init__(f"{_describe(cause)} (at {location})")
        self.cause = cause
        self.location = location

    @property
    def message(self) -> str:
        return _describe(self.cause)

    @classmethod
    def from_exception(cls, exc: Exception) -> "DatabaseError":
        # live stack holds the callers; the traceback holds the frames below the catch
        frames = traceback.extract_stack() + traceback.extract_tb(exc.__traceback__)
        return cls(exc, _call_site(frames))


def _describe(cause: Exception) -> str:
    # DBAPI errors carry the driver message on .orig; str() adds SQL and a docs link
    orig = getattr(cause, "orig", None)
    return str(orig if orig is not None else cause)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Re-raise SQLAlchemy errors as DatabaseError tagged with the failing call site."""
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        raise DatabaseError.from_exception(exc) from exc


def text_column(row: Mapping[str, Any], name: str) -> Optional[str]:
    """Read a nullable TEXT column, rejecting values of any other storage class."""
    value = row[name]
    if value is None or isinstance(value, str):
        return value
    raise DatabaseError.from_exception(
        TypeError(f"column '{name}' holds {type(value).__name__}, expected TEXT or NULL")
    )


class Database:
    """Handle on the local configuration store.

    ``:memory:`` keeps a single pooled connection so data survives between
    calls for the lifetime of the object.
    """

    def __init__(self, path: Union[str, Path] = MEMORY):
        self.path = str(path)
        self._engine: Optional[Engine] = None

    @property
    def is_memory(self) -> bool:
        return self.path == MEMORY

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            if self.is_memory:
                engine = create_engine(
                    "sqlite://",
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
            else:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
                engine = create_engine(f"sqlite:///{self.path}")
            try:
                with translate_errors():
                    metadata.create_all(engine)
            except DatabaseError:
                engine.dispose()
                raise
            self._engine = engine
        return self._engine

    def connect(self) -> Connection:
        with translate_errors():
            return self.engine.connect()

    def query_single_row(
        self, statement: TextClause, params: Optional[Mapping[str, Any]] = None
    ) -> Optional[RowMapping]:
        with translate_errors():
            with self.engine.connect() as conn:
                return conn.execute(statement, dict(params or {})).mappings().first()

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a connection whose statements commit together or not at all."""
        with translate_errors():
            with self.engine.begin() as conn:
                yield conn

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
