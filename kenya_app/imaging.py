import logging
from typing import Any, Dict

from .errors import MissingImageDataError
from .schemas import AIModule
from .settings import settings as set

logger = logging.getLogger(__name__)


def _build_image_prompt(prompt: str, module: AIModule) -> str:
    return (
        f"PROFESSIONAL VISUAL PRODUCTION FOR {AIModule(module).value}: {prompt}. "
        "Focus on accuracy, professional quality, and authentic African/Kenyan context."
    )


def build_image_request(prompt: str, module: AIModule = AIModule.CREATIVE) -> Dict[str, Any]:
    return {
        "model": set.image_model,
        "contents": {"parts": [{"text": _build_image_prompt(prompt, module)}]},
        "config": {"image_config": {"aspect_ratio": set.image_aspect_ratio}},
    }


def generate_image(backend, prompt: str, module: AIModule = AIModule.CREATIVE) -> str:
    """Generate one image and return it as a ``data:`` URI.

    Raises MissingImageDataError when the first candidate carries no inline image.
    """
    response = backend.generate_image(build_image_request(prompt, module))

    candidates = response.get("candidates") or [{}]
    parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
    for part in parts:
        inline = part.get("inline_data")
        if inline and inline.get("data"):
            mime = inline.get("mime_type") or "image/png"
            return f"data:{mime};base64,{inline['data']}"

    logger.warning("Image backend returned no inline data for module %s", AIModule(module).value)
    raise MissingImageDataError()
