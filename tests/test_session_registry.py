from models.session import SessionStatus
from rag_services.state import SessionRegistry


class TestSessionRegistry:
    def test_create_starts_processing(self):
        registry = SessionRegistry()
        session_id = registry.create("uploads/a.pdf")

        session = registry.get(session_id)
        assert session.status is SessionStatus.PROCESSING
        assert session.source_ref == "uploads/a.pdf"
        assert session.error_detail is None

    def test_ids_are_unique(self):
        registry = SessionRegistry()
        ids = {registry.create() for _ in range(500)}
        assert len(ids) == 500
        assert len(registry) == 500

    def test_get_unknown_returns_none(self):
        assert SessionRegistry().get("missing") is None

    def test_get_returns_a_copy(self):
        registry = SessionRegistry()
        session_id = registry.create()

        registry.get(session_id).status = SessionStatus.READY

        assert registry.get(session_id).status is SessionStatus.PROCESSING

    def test_mark_ready(self):
        registry = SessionRegistry()
        session_id = registry.create()

        assert registry.mark_ready(session_id) is True
        assert registry.get(session_id).status is SessionStatus.READY

    def test_mark_error_records_detail(self):
        registry = SessionRegistry()
        session_id = registry.create()

        assert registry.mark_error(session_id, "corrupt PDF") is True

        session = registry.get(session_id)
        assert session.status is SessionStatus.ERROR
        assert session.error_detail == "corrupt PDF"

    def test_terminal_states_are_final(self):
        registry = SessionRegistry()
        ready_id = registry.create()
        error_id = registry.create()
        registry.mark_ready(ready_id)
        registry.mark_error(error_id, "boom")

        assert registry.mark_error(ready_id, "late failure") is False
        assert registry.mark_ready(ready_id) is False
        assert registry.mark_ready(error_id) is False

        assert registry.get(ready_id).status is SessionStatus.READY
        assert registry.get(ready_id).error_detail is None
        assert registry.get(error_id).status is SessionStatus.ERROR
        assert registry.get(error_id).error_detail == "boom"

    def test_marking_unknown_session_does_not_raise(self):
        registry = SessionRegistry()
        assert registry.mark_ready("nope") is False
        assert registry.mark_error("nope", "detail") is False
        assert "nope" not in registry
