"""
Database Table Definitions.

This module defines the SQL schema using SQLModel.
We use the 'DBModel' suffix to distinguish these persistence models
from the Pydantic state model (SessionState).
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, Column
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel


class SessionDBModel(SQLModel, table=True):
    """
    Persistence model for conversation sessions.
    Maps 1-to-1 with the 'sessions' table.
    """

    __tablename__ = "sessions"

    # Channel conversation id; not necessarily a UUID.
    session_id: str = Field(primary_key=True, index=True)

    # The whole SessionState (dialog stack) as one JSON document.
    state: Dict[str, Any] = Field(
        sa_column=Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
