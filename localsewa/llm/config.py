from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class LLMConfig:
    """Groq settings for phrasing chat replies; the template reply is used when disabled."""

    api_key: str = field(default_factory=lambda: os.getenv("GROQ_API_KEY", ""))
    model: str = field(default_factory=lambda: os.getenv("LOCALSEWA_CHAT_MODEL", "llama-3.3-70b-versatile"))
    timeout: float = 10.0
    # chat replies list at most three providers
    max_tokens: int = 300
    temperature: float = 0.5
    enabled: bool = field(default_factory=lambda: _env_flag("LOCALSEWA_CHAT_LLM", True))


DEFAULT_LLM_CONFIG = LLMConfig()
