"""Application settings.

Values are read from the environment (or a local ``.env`` file) by
``pydantic-settings``. The LLM endpoint defaults to the OpenAI-compatible
Gemini API; point ``llm_base_url`` elsewhere to use another provider.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_title: str = "Kenya AI Assistant"
    platform_tag: str = "KenyaAI-Web-v5"
    log_level: str = "INFO"

    history_window: int = 10        # same-module turns sent as context
    trigger_excerpt_chars: int = 50  # excerpt length in safety events
    max_sessions: int = 1000         # in-memory chat sessions; oldest evicted first

# LLM settings (OpenAI-compatible endpoint)
    llm_api_key: str = ""
    llm_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_timeout: int = 30
    chat_model: str = "gemini-3-flash-preview"
    chat_model_with_location: str = "gemini-2.5-flash"

# Image settings
    image_model: str = "gemini-2.5-flash-image"
    image_aspect_ratio: str = "16:9"


settings = Settings()
