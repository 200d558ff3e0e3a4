from __future__ import annotations

import logging
from typing import Any

from groq import Groq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are LocalSewa's assistant for home services in the Kathmandu valley. "
    "Given a customer's message, what was detected from it and a short list of "
    "matching services, write a warm reply of at most 80 words. Mention each "
    "service by name with its price in NPR and, when known, its distance. "
    "Only mention services from the provided list. Do not use bullet points."
)


def _build_user_message(
    message: str,
    context: dict[str, Any],
    suggestions: list[dict[str, Any]],
) -> str:
    lines = [f"## Customer message\n{message}", "\n## Detected"]
    if context.get("category"):
        lines.append(f"- Category: {context['category']}")
    if context.get("area"):
        lines.append(f"- Area: {context['area']}")
    if context.get("budget"):
        lines.append(f"- Budget ceiling: NPR {context['budget']:,.0f}")

    lines.append("\n## Matching services")
    lines.append("| Name | Provider | Price (NPR) | Rating | Distance (km) |")
    lines.append("|---|---|---|---|---|")
    for s in suggestions:
        distance = s.get("distance_km")
        lines.append(
            f"| {s['name']} | {s.get('provider', '?')} | {s.get('price', '?')} "
            f"| {s.get('rating', 'N/A')} | {distance if distance is not None else 'unknown'} |"
        )

    return "\n".join(lines)


def compose_reply(
    message: str,
    context: dict[str, Any],
    suggestions: list[dict[str, Any]],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> str | None:
    """
    Ask Groq to phrase the assistant reply for the matched services.

    Returns ``None`` on any failure (disabled, timeout, API error, empty reply).
    """
    if not config.enabled or not config.api_key:
        return None

    if not suggestions:
        return None

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": _build_user_message(message, context, suggestions),
                },
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
        )

        reply = (response.choices[0].message.content or "").strip()
        return reply or None

    except Exception:
        logger.warning("Groq reply generation failed, falling back to template", exc_info=True)
        return None
