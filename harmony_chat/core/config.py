"""
Runtime configuration for the chat pipeline.

Values come from environment variables so the same configuration works for
the console frontend and for embedding the orchestrator elsewhere.
"""

import os
from typing import Literal, Optional
from pydantic import BaseModel, Field


DEFAULT_MODEL = "gpt-4o-mini"


class ChatConfig(BaseModel):
    """Settings shared by the orchestrator, gateway and reveal engine."""

    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    reveal_cadence_ms: float = Field(default=5.0, ge=0)
    reveal_chunk_size: int = Field(default=1, ge=1)
    call_to_action_delay: float = Field(default=0.5, ge=0)
    call_to_action_url: str = "https://www.ajnee.com"
    completion_timeout: Optional[float] = Field(default=60.0, gt=0)
    language: Literal["en", "ar"] = "en"
    stream: bool = False
    store_path: str = "conversations.json"

    @classmethod
    def from_env(cls) -> "ChatConfig":
        """Build a configuration from `HARMONY_CHAT_*` environment variables."""
        env = os.environ
        values = {}
        model = env.get("HARMONY_CHAT_MODEL") or env.get("LITELLM_MODEL")
        if model:
            values["model"] = model
        for key, name in [
            ("temperature", "HARMONY_CHAT_TEMPERATURE"),
            ("reveal_cadence_ms", "HARMONY_CHAT_REVEAL_CADENCE_MS"),
            ("reveal_chunk_size", "HARMONY_CHAT_REVEAL_CHUNK_SIZE"),
            ("call_to_action_delay", "HARMONY_CHAT_CTA_DELAY"),
            ("call_to_action_url", "HARMONY_CHAT_CTA_URL"),
            ("completion_timeout", "HARMONY_CHAT_TIMEOUT"),
            ("language", "HARMONY_CHAT_LANGUAGE"),
            ("store_path", "HARMONY_CHAT_STORE_PATH"),
        ]:
            if env.get(name):
                values[key] = env[name]
        if env.get("HARMONY_CHAT_STREAM"):
            values["stream"] = env["HARMONY_CHAT_STREAM"].lower() in ("1", "true", "yes")
        return cls.model_validate(values)
