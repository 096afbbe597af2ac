"""
HTTP API tests. The orchestrator dependency is overridden with one backed by FakeBackend.
"""

import pytest
from unittest.mock import Mock
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from kenya_app import main
from kenya_app.errors import BackendError
from kenya_app.orchestrator import ConversationOrchestrator
from kenya_app.registry import MANDATORY_DISCLAIMER

from conftest import FakeBackend


def _client(orch):
    main.app.dependency_overrides[main.get_orchestrator] = lambda: orch
    return TestClient(main.app)


@pytest.fixture(autouse=True)
def _reset():
    yield
    main.app.dependency_overrides.clear()
    main.SESSIONS.clear()


class TestChatEndpoint:

    def test_chat_returns_text_without_citations_key(self, orchestrator):
        resp = _client(orchestrator).post("/chat", json={"message": "Habari", "module": "General"})
        assert resp.status_code == 200
        assert resp.json() == {"text": "Karibu! How can I help?"}

    def test_chat_drafting_module_and_citations(self):
        chunks = [{"web": {"title": "Ombudsman", "uri": "https://ombudsman.go.ke"}}]
        orch = ConversationOrchestrator(backend=FakeBackend(chunks=chunks), sink=Mock())
        resp = _client(orch).post("/chat", json={"message": "Draft this", "module": "Concerns"})
        body = resp.json()
        assert body["text"].endswith(MANDATORY_DISCLAIMER)
        assert body["grounding_urls"] == [{"title": "Ombudsman", "uri": "https://ombudsman.go.ke"}]

    def test_chat_blocked_is_403(self, blocked_orchestrator):
        resp = _client(blocked_orchestrator).post("/chat", json={"message": "hi"})
        assert resp.status_code == 403
        assert "SECURITY BLOCK" in resp.json()["detail"]

    def test_backend_error_is_502(self):
        orch = ConversationOrchestrator(backend=FakeBackend(error=BackendError("timeout")), sink=Mock())
        resp = _client(orch).post("/chat", json={"message": "hi"})
        assert resp.status_code == 502
        assert resp.json()["detail"].startswith("llm_error")

    def test_unknown_module_rejected(self, orchestrator):
        resp = _client(orchestrator).post("/chat", json={"message": "hi", "module": "Astrology"})
        assert resp.status_code == 422


class TestSessions:

    def test_session_round_trip(self, orchestrator):
        client = _client(orchestrator)
        sid = client.post("/sessions", json={"module": "Healthcare"}).json()["id"]

        state = client.post(f"/sessions/{sid}/messages", json={"text": "I waited six hours"}).json()
        assert [m["role"] for m in state["history"]] == ["user", "model"]

        state = client.post(f"/sessions/{sid}/module", json={"module": "Response"}).json()
        assert state["module"] == "Response"
        assert state["history"] == []

    def test_blocked_session_refuses_further_input(self, blocked_orchestrator):
        client = _client(blocked_orchestrator)
        sid = client.post("/sessions", json={}).json()["id"]

        first = client.post(f"/sessions/{sid}/messages", json={"text": "hello"})
        assert first.status_code == 200
        assert "SECURITY BLOCK" in first.json()["error_state"]

        second = client.post(f"/sessions/{sid}/messages", json={"text": "hello?"})
        assert second.status_code == 403

    def test_unknown_session_is_404(self, orchestrator):
        assert _client(orchestrator).get("/sessions/nope").status_code == 404

    def test_delete_session(self, orchestrator):
        client = _client(orchestrator)
        sid = client.post("/sessions", json={}).json()["id"]

        assert client.delete(f"/sessions/{sid}").status_code == 204
        assert sid not in main.SESSIONS
        assert client.get(f"/sessions/{sid}").status_code == 404
        assert client.delete(f"/sessions/{sid}").status_code == 404

    def test_store_evicts_oldest_sessions(self, orchestrator, monkeypatch):
        monkeypatch.setattr(main.app_settings, "max_sessions", 3)
        client = _client(orchestrator)
        ids = [client.post("/sessions", json={}).json()["id"] for _ in range(5)]

        assert list(main.SESSIONS) == ids[2:]
        assert client.get(f"/sessions/{ids[0]}").status_code == 404
        assert client.get(f"/sessions/{ids[4]}").status_code == 200


class TestReadOnlyEndpoints:

    def test_compliance_report(self, orchestrator):
        body = _client(orchestrator).get("/compliance/report").json()
        assert body["overall_status"] == "valid"
        assert len(body["checks"]) == 3

    def test_compliance_documents(self, orchestrator):
        docs = _client(orchestrator).get("/compliance/documents").json()["documents"]
        assert set(docs) == {"regulatory_review_summary", "audit_logging_policy"}

    def test_modules_and_flags(self, orchestrator):
        client = _client(orchestrator)
        assert len(client.get("/modules").json()) == 10
        assert client.get("/flags").json()["complaints_safety_interrupt"] is True

    def test_health_and_metrics(self, orchestrator):
        client = _client(orchestrator)
        assert client.get("/health").json() == {"ok": True}
        assert "requests_total" in client.get("/metrics").text

    def test_every_route_is_counted(self, orchestrator):
        def count(route):
            return REGISTRY.get_sample_value("requests_total", {"route": route}) or 0

        routes = ["/modules", "/flags", "/compliance/documents", "/sessions", "/sessions/{id}",
                  "/sessions/{id}/module", "/sessions/{id}:delete"]
        before = {r: count(r) for r in routes}

        client = _client(orchestrator)
        client.get("/modules")
        client.get("/flags")
        client.get("/compliance/documents")
        sid = client.post("/sessions", json={}).json()["id"]
        client.get(f"/sessions/{sid}")
        client.post(f"/sessions/{sid}/module", json={"module": "Legal"})
        client.delete(f"/sessions/{sid}")

        assert {r: count(r) - before[r] for r in routes} == {r: 1 for r in routes}


class TestImageAndEdgeCases:

    def test_image(self):
        parts = [{"inline_data": {"data": "Zm9v", "mime_type": "image/png"}}]
        orch = ConversationOrchestrator(backend=FakeBackend(image_parts=parts), sink=Mock())
        body = _client(orch).post("/image", json={"prompt": "Maasai Mara"}).json()
        assert body["url"] == "data:image/png;base64,Zm9v"
        assert body["prompt"] == "Maasai Mara"

    def test_image_without_data_is_502(self, orchestrator):
        resp = _client(orchestrator).post("/image", json={"prompt": "Maasai Mara"})
        assert resp.status_code == 502

    def test_edge_case_run(self, orchestrator):
        body = _client(orchestrator).post("/edge-cases/run").json()
        assert body["count"] == 5
        assert body["passed"] == 5
