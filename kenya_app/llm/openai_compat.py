"""
Completion backend over an OpenAI-compatible API.

The orchestrator speaks a provider-neutral request/response shape
(``contents`` / ``config`` in, ``text`` / ``candidates`` out). This adapter
translates that shape to the ``openai`` SDK and back, so any OpenAI-compatible
endpoint can serve as the backend. Configure it in `kenya_app/settings.py`.

Retrieval tools and tool_config are forwarded as extra body fields; providers
that support grounding (e.g. the Gemini endpoint) honour them, others ignore them.
Web citations come back as ``url_citation`` annotations and are mapped to
``grounding_chunks``.
"""

import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from kenya_app.errors import BackendError
from kenya_app.settings import settings as set

logger = logging.getLogger(__name__)

# aspect ratio -> closest size accepted by images.generate
IMAGE_SIZES = {
    "1:1": "1024x1024",
    "16:9": "1792x1024",
    "9:16": "1024x1792",
}


def _create_client(api_key: str = set.llm_api_key, base_url: str = set.llm_base_url) -> OpenAI:
    return OpenAI(base_url=base_url, api_key=api_key)


def _to_chat_messages(system_instruction: Optional[str], contents: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    messages = []
    if system_instruction:
        messages.append({"role": "system", "content": system_instruction})
    for turn in contents:
        role = "assistant" if turn.get("role") == "model" else "user"
        text = "".join(p.get("text", "") for p in turn.get("parts", []))
        messages.append({"role": role, "content": text})
    return messages


def _grounding_chunks(message) -> List[Dict[str, Any]]:
    chunks = []
    for ann in getattr(message, "annotations", None) or []:
        cite = getattr(ann, "url_citation", None)
        if getattr(ann, "type", None) == "url_citation" and cite is not None:
            chunks.append({"web": {"title": cite.title, "uri": cite.url}})
    return chunks


class OpenAICompatBackend:
    def __init__(self, client: Optional[OpenAI] = None, timeout: int = set.llm_timeout):
        self.client = client or _create_client()
        self.timeout = timeout

    def generate_content(self, request: Dict[str, Any]) -> Dict[str, Any]:
        config = request.get("config", {})
        extra_body = {"tools": config.get("tools", [])}
        if config.get("tool_config"):
            extra_body["tool_config"] = config["tool_config"]

        try:
            resp = self.client.chat.completions.create(
                model=request["model"],
                messages=_to_chat_messages(config.get("system_instruction"), request.get("contents", [])),
                extra_body=extra_body,
                timeout=self.timeout,
            )
        except OpenAIError as exc:
            raise BackendError(f"Completion request failed: {exc}") from exc

        if not resp.choices:
            raise BackendError("Completion response contained no choices")

        message = resp.choices[0].message
        return {
            "text": message.content,
            "candidates": [{"grounding_metadata": {"grounding_chunks": _grounding_chunks(message)}}],
        }

    def generate_image(self, request: Dict[str, Any]) -> Dict[str, Any]:
        prompt = "".join(p.get("text", "") for p in request["contents"]["parts"])
        aspect = request.get("config", {}).get("image_config", {}).get("aspect_ratio", "1:1")

        try:
            resp = self.client.images.generate(
                model=request["model"],
                prompt=prompt,
                size=IMAGE_SIZES.get(aspect, "1024x1024"),
                response_format="b64_json",
                n=1,
                timeout=self.timeout,
            )
        except OpenAIError as exc:
            raise BackendError(f"Image request failed: {exc}") from exc

        parts = [
            {"inline_data": {"data": img.b64_json, "mime_type": "image/png"}}
            for img in (resp.data or [])
            if img.b64_json
        ]
        return {"candidates": [{"content": {"parts": parts}}]}


def get_backend(timeout: int = set.llm_timeout) -> OpenAICompatBackend:
    """
    Return the default backend.
    Usage:
        backend = get_backend()
        orchestrator = ConversationOrchestrator(backend=backend)
    """
    return OpenAICompatBackend(timeout=timeout)
