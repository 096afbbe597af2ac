"""
Conversation orchestrator.

Wraps every call to the completion backend in the compliance gate and the
safety interrupt.

Steps per send_message():
1. Re-run the compliance gate on the canonical configuration (never cached)
- a blocked report raises ConfigurationBlockedError before the backend is reached.
2. Scan the user input for aggressive language (event only, no control flow).
3. Compose the system instruction: canonical config + module prompt.
4. Call the backend with the windowed same-module history and the new turn
- retrieval tools (and the backend variant) depend on whether a location is given.
5. Substitute a fallback text when the backend returns none.
6. Drafting modules: emit a creation event and append the mandatory disclaimer.
7. Flatten web/maps grounding chunks into {title, uri}; omit them when there are none.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from .analytics import EventSink, emit, log_event
from .governance import ComplianceGate, SafetyInterrupt, enforce
from .registry import ConfigRegistry
from .schemas import DRAFTING_MODULES, AIModule, ChatResult, FeatureFlags, GeoLocation, GroundingUrl, Message
from .settings import settings as set

FALLBACK_TEXT = "I'm sorry, I couldn't process that. Please try again."

DRAFT_EVENTS = {
    AIModule.CONCERNS: ("complaint_draft_created", {
        "sector": "Public",
        "tone_selected": "Calm/Factual",
        "user_role": "Citizen/Patient",
    }),
    AIModule.RESPONSE: ("complaint_response_created", {
        "sector": "Institutional",
        "institution_type": "Service Provider",
    }),
}

logger = logging.getLogger(__name__)


def window_history(history: Sequence[Message], module: AIModule, limit: int = set.history_window) -> List[Message]:
    """Last `limit` turns of `module`, in original order."""
    same_module = [m for m in history if m.module == module]
    return same_module[-limit:] if limit > 0 else []


def _to_contents(history: Sequence[Message], text: str) -> List[Dict[str, Any]]:
    contents = [{"role": m.role, "parts": [{"text": m.text}]} for m in history]
    contents.append({"role": "user", "parts": [{"text": text}]})
    return contents


def _retrieval_config(location: Optional[GeoLocation]):
    """Return (tools, tool_config) for the request."""
    tools: List[Dict[str, Any]] = [{"google_search": {}}]
    if location is None:
        return tools, None
    tools.append({"google_maps": {}})
    tool_config = {
        "retrieval_config": {"lat_lng": {"latitude": location.lat, "longitude": location.lng}}
    }
    return tools, tool_config


def extract_grounding_urls(response: Dict[str, Any]) -> Optional[List[GroundingUrl]]:
    """Flatten web and maps citations; None (not []) when nothing was cited."""
    candidates = response.get("candidates") or []
    if not candidates:
        return None
    metadata = (candidates[0] or {}).get("grounding_metadata") or {}
    urls = []
    for chunk in metadata.get("grounding_chunks") or []:
        source = chunk.get("web") or chunk.get("maps")
        if not source or not source.get("uri"):
            continue
        urls.append(GroundingUrl(title=source.get("title") or "", uri=source["uri"]))
    return urls or None


class ConversationOrchestrator:
    def __init__(
        self,
        backend=None,
        registry: ConfigRegistry = ConfigRegistry(),
        flags: FeatureFlags = FeatureFlags(),
        sink: Optional[EventSink] = log_event,
        history_window: int = set.history_window,
    ):
        if backend is None:
            from .llm.openai_compat import get_backend
            backend = get_backend()
        self.backend = backend
        self.registry = registry
        self.flags = flags
        self.sink = sink
        self.history_window = history_window
        self.gate = ComplianceGate(flags)
        self.safety = SafetyInterrupt(sink)

    def _select_model(self, location: Optional[GeoLocation]) -> str:
        return set.chat_model_with_location if location is not None else set.chat_model

    def build_request(
        self,
        text: str,
        history: Sequence[Message],
        module: AIModule,
        location: Optional[GeoLocation] = None,
    ) -> Dict[str, Any]:
        tools, tool_config = _retrieval_config(location)
        config: Dict[str, Any] = {
            "system_instruction": self.registry.system_instruction(module),
            "tools": tools,
        }
        if tool_config is not None:
            config["tool_config"] = tool_config
        return {
            "model": self._select_model(location),
            "contents": _to_contents(window_history(history, module, self.history_window), text),
            "config": config,
        }

    def send_message(
        self,
        text: str,
        history: Sequence[Message] = (),
        module: AIModule = AIModule.GENERAL,
        location: Optional[GeoLocation] = None,
    ) -> ChatResult:
        module = AIModule(module)

        # 1. Compliance gate (raises when blocked)
        report = self.gate.validate(self.registry.canonical_config)
        enforce(report, self.sink)

        # 2. Safety interrupt, observation only
        self.safety.scan(text, module)

        # 3-4. Compose and call the backend
        request = self.build_request(text, history, module, location)
        logger.debug("Calling backend %s for module %s (%d turns)", request["model"], module.value, len(request["contents"]))
        response = self.backend.generate_content(request)

        # 5. Fallback text
        out = response.get("text") or FALLBACK_TEXT

        # 6. Mandatory disclaimer for drafting modules
        if module in DRAFTING_MODULES:
            name, props = DRAFT_EVENTS[module]
            emit(self.sink, name, dict(props))
            out += self.registry.disclaimer

        # 7. Citations
        return ChatResult(text=out, grounding_urls=extract_grounding_urls(response))
