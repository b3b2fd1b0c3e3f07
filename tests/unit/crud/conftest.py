"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel

from mdimport.crud.sql_store import SQLStore


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine; SQLStore creates the tables."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="sql_store")
def sql_store_fixture(engine):
    return SQLStore(engine)
