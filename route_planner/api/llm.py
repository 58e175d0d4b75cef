"""LLM helper functions for the route planner.

Builds the route prompts and calls an OpenAI-compatible Chat Completions
endpoint (Qwen through DashScope's compatible mode unless configured
otherwise). Parsing of the answer lives in ``route_planner.api.parser``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from openai import OpenAI

from route_planner.api.config import get_completion_config, get_openai_api_key
from route_planner.api.errors import UpstreamError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Prompt construction helpers
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """Ты - опытный планировщик маршрутов по Москве. Создавай подробные, интересные маршруты.
Важно: указывай ТОЧНЫЕ названия мест и достопримечательностей, которые существуют в Москве.

Структура ответа должна быть такой:

🎯 КРАТКИЙ ОБЗОР МАРШРУТА
[Очень краткое описание маршрута в 2-3 предложения]

📍 ТОЧКИ МАРШРУТА:

1. [Точное название места] 🏛️
   ⏱️ Время: [длительность пребывания]
   📝 Описание: [краткое описание места]
   🎯 Активности:
   - [активность 1]
   - [активность 2]
   - [активность 3]
   💡 Советы:
   - [совет 1]
   - [совет 2]
   🚶 Переход: [как добраться до следующей точки, сколько времени займет, с детальным описанием маршрута]"""


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_user_prompt(params: Dict[str, Any]) -> str:
    """Render trip parameters into the user message."""
    categories = params.get("categories") or []
    return (
        "Создай детальный маршрут по Москве со следующими параметрами:\n"
        f"- Категории: {', '.join(str(c) for c in categories)}\n"
        f"- Длительность: {params.get('duration')} часов\n"
        f"- Темп: {params.get('pace', '')}\n"
        f"- Способ передвижения: {params.get('transportType', '')}\n"
        f"- Время суток: {params.get('timeOfDay', '')}\n"
        f"- Доступность: {params.get('accessibility', '')}\n"
        f"- Дополнительные пожелания: {params.get('preferences', '')}"
    )


# ---------------------------------------------------------------------------
# Completion client
# ---------------------------------------------------------------------------

class CompletionService:
    """Thin wrapper over ``OpenAI.chat.completions`` returning plain text."""

    def __init__(self, client: Optional[OpenAI] = None, config: Optional[Dict[str, Any]] = None):
        self.config = config or get_completion_config()
        self._client = client

    @property
    def client(self) -> OpenAI:
        # Created lazily so the app can start without credentials.
        if self._client is None:
            self._client = OpenAI(
                api_key=get_openai_api_key(),
                base_url=self.config["base_url"],
            )
        return self._client

    def generate(self, system_prompt: str, user_prompt: str) -> str:
        """Return the completion text or raise ``UpstreamError``."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        logger.debug("Calling chat completion: model=%s", self.config["model"])

        try:
            response = self.client.chat.completions.create(
                model=self.config["model"],
                messages=messages,
                temperature=self.config["temperature"],
                max_tokens=self.config["max_tokens"],
            )
        except Exception as exc:
            logger.error("Completion request failed: %s", exc)
            raise UpstreamError(f"Completion request failed: {exc}") from exc

        if not response.choices:
            raise UpstreamError("Completion response has no choices")

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise UpstreamError("Completion response is empty")
        return content
