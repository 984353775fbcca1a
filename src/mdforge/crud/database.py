"""Engine and session helpers for the SQL author registry"""

import os

from sqlmodel import Session, SQLModel, create_engine

from mdforge.crud.models import AuthorRow  # noqa: F401 - registers the table on SQLModel.metadata


DEFAULT_DB_URL = "sqlite:///mdforge.db"


def get_url(explicit: str | None = None) -> str:
    """Return explicit, else MDFORGE_DB_URL, else the local SQLite default."""
    if explicit:
        return explicit
    env = os.getenv("MDFORGE_DB_URL")
    if env:
        return env
    return DEFAULT_DB_URL


def make_engine(db_url: str):
    return create_engine(db_url, echo=False)


def init_db(engine) -> None:
    SQLModel.metadata.create_all(engine)


def reset_db(engine) -> None:
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)


def get_session(engine) -> Session:
    return Session(engine)
