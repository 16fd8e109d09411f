"""
Unit Tests - Sessions

Tests for State, Session and the in-memory session store.
"""

import threading

import pytest

from agentrun.core.exceptions import SessionError, SessionNotFoundError
from agentrun.core.types import Content, Event, EventActions
from agentrun.sessions import InMemorySessionService, Session, State


class TestState:
    """Tests for State."""

    def test_get_set(self):
        """Test basic access."""
        state = State({"a": 1})
        state.set("b", 2)
        state["c"] = 3

        assert state.get("a") == 1
        assert state["b"] == 2
        assert state.get("missing", "default") == "default"
        assert "c" in state
        assert len(state) == 3

    def test_to_dict_is_snapshot(self):
        """Test that later writes do not show through a snapshot."""
        state = State({"a": 1})
        snapshot = state.to_dict()
        state.set("a", 2)

        assert snapshot == {"a": 1}

    def test_delta_and_commit(self):
        """Test change tracking."""
        state = State({"seed": 0})
        assert not state.has_delta()

        state.update({"x": 1, "y": 2})
        assert state.delta() == {"x": 1, "y": 2}

        assert state.commit() == {"x": 1, "y": 2}
        assert not state.has_delta()
        assert state.to_dict() == {"seed": 0, "x": 1, "y": 2}

    def test_bulk_update_is_atomic(self):
        """Test that a reader never sees half of a bulk update."""
        state = State({"k1": 0, "k2": 0})
        torn: list[tuple] = []
        stop = threading.Event()

        def writer():
            for i in range(1, 5000):
                state.update({"k1": i, "k2": i})
            stop.set()

        def reader():
            while not stop.is_set():
                snapshot = state.to_dict()
                pair = (snapshot["k1"], snapshot["k2"])
                if pair[0] != pair[1]:
                    torn.append(pair)

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert torn == []


class TestSession:
    """Tests for Session."""

    def test_add_event_moves_update_time(self):
        """Test that last_update_time never goes backwards."""
        session = Session(app_name="a", user_id="u")
        before = session.last_update_time

        session.add_event(Event(author="x"))

        assert session.event_count == 1
        assert session.last_update_time >= before

    def test_get_events_is_copy(self):
        """Test that callers cannot mutate the log through get_events."""
        session = Session(app_name="a", user_id="u")
        session.add_event(Event(author="x"))

        session.get_events().clear()

        assert session.event_count == 1

    def test_recent_events(self):
        """Test the tail helper."""
        session = Session(app_name="a", user_id="u")
        for i in range(5):
            session.add_event(Event(author=str(i)))

        assert [e.author for e in session.get_recent_events(2)] == ["3", "4"]
        assert session.get_recent_events(0) == []


class TestInMemorySessionService:
    """Tests for InMemorySessionService."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, session_service):
        """Test round trip through the store."""
        created = await session_service.create_session(
            app_name="app", user_id="u1", session_id="s1", state={"k": "v"}
        )
        fetched = await session_service.get_session(app_name="app", user_id="u1", session_id="s1")

        assert fetched is created
        assert fetched.state.get("k") == "v"

    @pytest.mark.asyncio
    async def test_missing_session_is_none(self, session_service):
        """Test the not-found sentinel."""
        assert await session_service.get_session(app_name="a", user_id="u", session_id="x") is None

    @pytest.mark.asyncio
    async def test_generated_id(self, session_service):
        """Test that a missing session id is generated."""
        session = await session_service.create_session(app_name="a", user_id="u")
        assert session.id

    @pytest.mark.asyncio
    async def test_duplicate_create_rejected(self, session_service):
        """Test that an existing key cannot be recreated."""
        await session_service.create_session(app_name="a", user_id="u", session_id="s")

        with pytest.raises(SessionError) as exc_info:
            await session_service.create_session(app_name="a", user_id="u", session_id="s")
        assert exc_info.value.code == "SESSION_EXISTS"

    @pytest.mark.asyncio
    async def test_list_sessions_does_not_leak_across_users(self, session_service):
        """Test that user 'u1' does not see sessions of user 'u10'."""
        await session_service.create_session(app_name="app", user_id="u1", session_id="a")
        await session_service.create_session(app_name="app", user_id="u10", session_id="b")
        await session_service.create_session(app_name="other", user_id="u1", session_id="c")

        sessions = await session_service.list_sessions(app_name="app", user_id="u1")

        assert [s.id for s in sessions] == ["a"]

    @pytest.mark.asyncio
    async def test_delete(self, session_service):
        """Test deletion."""
        await session_service.create_session(app_name="a", user_id="u", session_id="s")

        assert await session_service.delete_session(app_name="a", user_id="u", session_id="s")
        assert not await session_service.delete_session(app_name="a", user_id="u", session_id="s")
        assert session_service.session_count == 0

    @pytest.mark.asyncio
    async def test_append_and_list_events(self, session_service, stored_session):
        """Test that events are listed in insertion order."""
        events = [Event(author=f"a{i}") for i in range(3)]
        for event in events:
            await session_service.append_event(stored_session, event)

        listed = await session_service.list_events(
            app_name="test-app", user_id="test-user", session_id=stored_session.id
        )

        assert [e.id for e in listed] == [e.id for e in events]

    @pytest.mark.asyncio
    async def test_append_applies_state_delta(self, session_service, stored_session):
        """Test that an event's state delta lands in session state."""
        event = Event(author="a", actions=EventActions(state_delta={"x": 1, "y": 2}))

        await session_service.append_event(stored_session, event)

        assert stored_session.state.to_dict() == {"x": 1, "y": 2}

    @pytest.mark.asyncio
    async def test_append_to_unknown_session(self, session_service):
        """Test that appending to a session outside the store fails."""
        detached = Session(app_name="a", user_id="u")

        with pytest.raises(SessionNotFoundError):
            await session_service.append_event(detached, Event(author="x"))

    @pytest.mark.asyncio
    async def test_list_events_of_missing_session(self, session_service):
        """Test that a missing session has no events."""
        assert await session_service.list_events(app_name="a", user_id="u", session_id="x") == []

    @pytest.mark.asyncio
    async def test_close_session_is_noop(self, session_service, stored_session):
        """Test that closing keeps the session."""
        await session_service.close_session(
            app_name="test-app", user_id="test-user", session_id=stored_session.id
        )
        assert session_service.session_count == 1

    @pytest.mark.asyncio
    async def test_user_content_event(self, session_service, stored_session):
        """Test that stored events keep their content."""
        event = Event(author="user", content=Content.from_text("user", "hi"))
        await session_service.append_event(stored_session, event)

        assert stored_session.events[-1].text == "hi"
