"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from mdforge.crud.models import AuthorRow


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="author_row")
def author_row_fixture(session):
    """A registered author persisted to the session."""
    row = AuthorRow(key="jdoe", name="Jane Doe", avatar="/jane.png", bio="Writes things.")
    session.add(row)
    session.flush()
    return row
