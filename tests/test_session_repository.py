"""Tests for session persistence."""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from smartthings_dialogs.infrastructure.database.connection import init_db
from smartthings_dialogs.repositories.session import InMemorySessionRepository, SqlSessionRepository
from smartthings_dialogs.state.models import Frame, SessionState


@pytest.fixture
def sql_repo() -> SqlSessionRepository:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return SqlSessionRepository(engine)


@pytest.fixture(params=["memory", "sql"])
def repo(request, sql_repo):
    if request.param == "memory":
        return InMemorySessionRepository()
    return sql_repo


class TestSessionRepository:
    """Behaviour shared by every repository."""

    def test_get_or_create_starts_empty(self, repo) -> None:
        session = repo.get_or_create("conv-1")
        assert session.session_id == "conv-1"
        assert session.depth == 0
        assert repo.get("conv-1") is not None

    def test_stack_round_trip(self, repo) -> None:
        session = repo.get_or_create("conv-1")
        session.stack.append(Frame(flow_id="main", step_index=1, state={"values": {"a": 1}}))
        session.stack.append(Frame(flow_id="sign_in", state={"expires_at": "2030-01-01T00:00:00+00:00"}))
        repo.save(session)

        loaded = repo.get("conv-1")

        assert [f.flow_id for f in loaded.stack] == ["main", "sign_in"]
        assert loaded.stack[0].step_index == 1
        assert loaded.stack[0].state == {"values": {"a": 1}}

    def test_unsaved_changes_are_not_visible(self, repo) -> None:
        session = repo.get_or_create("conv-1")
        session.stack.append(Frame(flow_id="main"))

        assert repo.get("conv-1").depth == 0

    def test_delete(self, repo) -> None:
        repo.get_or_create("conv-1")
        assert repo.delete("conv-1") is True
        assert repo.get("conv-1") is None
        assert repo.delete("conv-1") is False

    def test_missing_session(self, repo) -> None:
        assert repo.get("nope") is None


def test_sql_save_requires_existing_row(sql_repo) -> None:
    with pytest.raises(ValueError):
        sql_repo.save(SessionState(session_id="ghost"))
