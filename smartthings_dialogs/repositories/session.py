from abc import ABC, abstractmethod
from typing import Optional, Dict
from datetime import datetime

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

# Domain & Infra Imports
from ..state.models import SessionState
from ..infrastructure.database.tables import SessionDBModel


class SessionRepository(ABC):
    """
    Defines how the router loads and stores conversation sessions, keyed by
    conversation id. The dialog stack is read once at the start of a turn
    and written once at the end.
    """

    @abstractmethod
    def get(self, session_id: str) -> Optional[SessionState]:
        """Retrieves a session by conversation id."""
        pass

    @abstractmethod
    def get_or_create(self, session_id: str) -> SessionState:
        """Retrieves a session, creating an empty one on first contact."""
        pass

    @abstractmethod
    def save(self, session: SessionState):
        """Persists the session state."""
        pass

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Deletes a session. Returns True if found and deleted."""
        pass


class InMemorySessionRepository(SessionRepository):
    """
    Uses in-memory dictionary for session storage for testing/dev purposes.
    Sessions are stored as JSON snapshots so callers never share live objects.
    """

    def __init__(self):
        self._store: Dict[str, dict] = {}

    def get(self, session_id: str) -> Optional[SessionState]:
        snapshot = self._store.get(session_id)
        if snapshot is None:
            return None
        return SessionState.model_validate(snapshot)

    def get_or_create(self, session_id: str) -> SessionState:
        session = self.get(session_id)
        if session is None:
            session = SessionState(session_id=session_id)
            self.save(session)
        return session

    def save(self, session: SessionState):
        session.updated_at = datetime.utcnow()
        self._store[session.session_id] = session.model_dump(mode="json")

    def delete(self, session_id: str) -> bool:
        if session_id in self._store:
            del self._store[session_id]
            return True
        return False


class SqlSessionRepository(SessionRepository):
    """
    SQL storage for session state (JSONB on PostgreSQL, JSON elsewhere).
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def get(self, session_id: str) -> Optional[SessionState]:
        with Session(self.engine) as db:
            result = db.get(SessionDBModel, session_id)
            if not result:
                return None

            # Deserialize JSON back into the Pydantic state model
            session = SessionState(**result.state)

            # The SQL column is the source of truth for the timestamp
            session.updated_at = result.updated_at
            return session

    def get_or_create(self, session_id: str) -> SessionState:
        session = self.get(session_id)
        if session is not None:
            return session

        session = SessionState(session_id=session_id)
        with Session(self.engine) as db:
            db.add(SessionDBModel(session_id=session_id, state=session.model_dump(mode="json")))
            db.commit()
        return session

    def save(self, session: SessionState):
        with Session(self.engine) as db:
            statement = select(SessionDBModel).where(
                SessionDBModel.session_id == session.session_id
            )
            result = db.exec(statement).first()

            if not result:
                raise ValueError(f"Session {session.session_id} does not exist in DB.")

            result.state = session.model_dump(mode="json")
            result.updated_at = datetime.utcnow()
            db.add(result)
            db.commit()

    def delete(self, session_id: str) -> bool:
        with Session(self.engine) as db:
            result = db.get(SessionDBModel, session_id)
            if result:
                db.delete(result)
                db.commit()
                return True
            return False
