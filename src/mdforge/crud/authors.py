"""Author registry backends: YAML mapping file or SQL `authors` table"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

import yaml
from pydantic import ValidationError
from sqlmodel import Session, select

from mdforge.core.models import Author
from mdforge.crud.database import get_session, init_db, make_engine
from mdforge.crud.models import AuthorRow


logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


class AuthorRegistry(Protocol):
    def lookup(self, key: str) -> Optional[Author]:  # pragma: no cover - structural protocol
        """Return the author registered under key, or None."""


def _to_author(row: AuthorRow) -> Author:
    return Author(key=row.key, name=row.name, avatar=row.avatar, bio=row.bio)


class YamlAuthorRegistry:
    """Authors read once from a `key: {name, avatar, bio}` mapping file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.authors = self._load()

    def _load(self) -> dict[str, Author]:
        if not self.path.exists():
            logger.warning("Author registry %s not found; no authors will resolve", self.path)
            return {}
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid author registry {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid author registry {self.path}: expected a mapping")

        authors: dict[str, Author] = {}
        for key, entry in data.items():
            try:
                authors[str(key)] = Author(key=str(key), **(entry or {}))
            except (TypeError, ValidationError) as e:
                raise ValueError(f"Invalid author entry {key!r} in {self.path}: {e}") from e
        return authors

    def lookup(self, key: str) -> Optional[Author]:
        return self.authors.get(key)


class SQLAuthorRegistry:
    """Authors stored in the `authors` table; each lookup opens a short session."""

    def __init__(self, engine) -> None:
        self.engine = engine

    def lookup(self, key: str) -> Optional[Author]:
        with get_session(self.engine) as session:
            row = session.get(AuthorRow, key)
            return _to_author(row) if row else None


def open_registry(source: str) -> AuthorRegistry:
    """Pick the backend by the shape of source: a .yaml/.yml path or an SQLAlchemy URL."""
    if "://" in source:
        engine = make_engine(source)
        init_db(engine)
        return SQLAuthorRegistry(engine)
    path = Path(source)
    if path.suffix.lower() not in YAML_SUFFIXES:
        raise ValueError(f"Unsupported author registry {source!r}: expected a .yaml file or a database URL")
    return YamlAuthorRegistry(path)


def add_author(session: Session, key: str, name: str = "", avatar: str = "", bio: str = "") -> tuple[AuthorRow, str]:
    """Insert or update an author row. Returns (row, 'created' | 'updated').

    Flushes but does not commit; caller controls the transaction.
    """
    row = session.get(AuthorRow, key)
    status = "updated"
    if row is None:
        row = AuthorRow(key=key)
        status = "created"
    row.name = name
    row.avatar = avatar
    row.bio = bio
    row.updated_at = datetime.now()
    session.add(row)
    session.flush()
    return row, status


def list_authors(session: Session) -> list[Author]:
    """Return all registered authors ordered by key."""
    rows = session.exec(select(AuthorRow).order_by(AuthorRow.key)).all()
    return [_to_author(row) for row in rows]
