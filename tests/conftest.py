import pytest
from unittest.mock import Mock

from kenya_app.orchestrator import ConversationOrchestrator
from kenya_app.registry import ConfigRegistry
from kenya_app.schemas import FeatureFlags


class FakeBackend:
    """Records requests and replays a canned response."""

    def __init__(self, text="Karibu! How can I help?", chunks=None, image_parts=None, error=None):
        self.text = text
        self.chunks = chunks or []
        self.image_parts = image_parts
        self.error = error
        self.requests = []
        self.image_requests = []

    def generate_content(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return {
            "text": self.text,
            "candidates": [{"grounding_metadata": {"grounding_chunks": self.chunks}}],
        }

    def generate_image(self, request):
        self.image_requests.append(request)
        if self.error is not None:
            raise self.error
        return {"candidates": [{"content": {"parts": self.image_parts or []}}]}


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def sink():
    return Mock()


@pytest.fixture
def orchestrator(backend, sink):
    return ConversationOrchestrator(backend=backend, sink=sink)


@pytest.fixture
def blocked_orchestrator(backend, sink):
    """Orchestrator whose canonical config lacks the schema root."""
    registry = ConfigRegistry(canonical_config="global_system_prompt: be helpful")
    return ConversationOrchestrator(backend=backend, registry=registry, flags=FeatureFlags(), sink=sink)
