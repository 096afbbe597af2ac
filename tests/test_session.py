import threading

import pytest

from kenya_app.errors import BackendError, ConfigurationBlockedError
from kenya_app.registry import MANDATORY_DISCLAIMER
from kenya_app.orchestrator import ConversationOrchestrator
from kenya_app.schemas import AIModule
from kenya_app.session import ChatSession

from conftest import FakeBackend


class TestChatSession:

    def test_send_appends_user_and_model_messages(self, orchestrator):
        session = ChatSession(orchestrator, module=AIModule.CONCERNS)
        reply = session.send("The clinic lost my records")
        assert reply.role == "model"
        assert reply.text.endswith(MANDATORY_DISCLAIMER)
        assert [(m.role, m.module) for m in session.history] == [
            ("user", AIModule.CONCERNS),
            ("model", AIModule.CONCERNS),
        ]

    def test_blank_input_is_ignored(self, orchestrator, backend):
        session = ChatSession(orchestrator)
        assert session.send("   ") is None
        assert session.history == []
        assert backend.requests == []

    def test_prior_history_is_sent_as_context(self, orchestrator, backend):
        session = ChatSession(orchestrator)
        session.send("first")
        session.send("second")
        texts = [c["parts"][0]["text"] for c in backend.requests[1]["contents"]]
        assert texts == ["first", "Karibu! How can I help?", "second"]

    def test_backend_failure_becomes_model_message(self, sink):
        orch = ConversationOrchestrator(backend=FakeBackend(error=BackendError("quota exceeded")), sink=sink)
        session = ChatSession(orch)
        reply = session.send("hello")
        assert reply.role == "model"
        assert "quota exceeded" in reply.text
        assert not session.locked
        # session stays usable
        session.send("again")
        assert len(session.history) == 4

    def test_security_block_freezes_session(self, blocked_orchestrator, backend):
        session = ChatSession(blocked_orchestrator)
        reply = session.send("hello")
        assert "SECURITY BLOCK" in reply.text
        assert session.locked
        with pytest.raises(ConfigurationBlockedError):
            session.send("hello again")
        assert len(session.history) == 2
        assert backend.requests == []

    def test_switch_module_resets_state(self, blocked_orchestrator):
        session = ChatSession(blocked_orchestrator)
        session.send("hello")
        session.switch_module(AIModule.LEGAL)
        assert session.module == AIModule.LEGAL
        assert session.history == []
        assert not session.locked

    def test_history_is_a_copy(self, orchestrator):
        session = ChatSession(orchestrator)
        session.send("hi")
        session.history.clear()
        assert len(session.history) == 2

    def test_send_while_request_running_is_ignored(self, sink):
        entered, release = threading.Event(), threading.Event()

        class GatedBackend(FakeBackend):
            def generate_content(self, request):
                entered.set()
                release.wait(5)
                return super().generate_content(request)

        backend = GatedBackend()
        session = ChatSession(ConversationOrchestrator(backend=backend, sink=sink))
        replies = []
        worker = threading.Thread(target=lambda: replies.append(session.send("a")))
        worker.start()
        assert entered.wait(5)

        assert session.in_flight
        assert session.send("b") is None
        release.set()
        worker.join(5)

        assert replies[0].role == "model"
        assert not session.in_flight
        assert [(m.role, m.text) for m in session.history] == [
            ("user", "a"),
            ("model", "Karibu! How can I help?"),
        ]
        assert len(backend.requests) == 1

    def test_failed_request_releases_session(self, sink):
        session = ChatSession(ConversationOrchestrator(backend=FakeBackend(error=BackendError("down")), sink=sink))
        session.send("hello")
        assert not session.in_flight
        assert session.send("again") is not None
