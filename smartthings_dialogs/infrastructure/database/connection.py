"""
Database Connection Manager.

This module handles the low-level details of connecting to the session
database. Engines are created on demand so importing the package never
opens a connection.
"""

from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlmodel import create_engine, SQLModel

from ...config import settings


@lru_cache()
def get_engine(database_url: str = settings.DATABASE_URL) -> Engine:
    # echo=False in production to avoid leaking conversation state in logs
    return create_engine(database_url, echo=False)


def init_db(engine: Engine):
    """
    Idempotent initialization.
    Creates tables if they do not exist.
    """
    SQLModel.metadata.create_all(engine)
