"""Tests for prompt building and the completion wrapper."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from route_planner.api.errors import UpstreamError
from route_planner.api.llm import CompletionService, build_system_prompt, build_user_prompt

CONFIG = {"base_url": "http://llm.local/v1", "model": "qwen-max", "temperature": 0.7, "max_tokens": 3000}


def _response(*contents):
    choices = [SimpleNamespace(message=SimpleNamespace(content=c)) for c in contents]
    return SimpleNamespace(choices=choices)


def test_system_prompt_contains_markers():
    prompt = build_system_prompt()
    for marker in ("🎯 КРАТКИЙ ОБЗОР МАРШРУТА", "⏱️ Время:", "📝 Описание:", "💡", "🚶 Переход:"):
        assert marker in prompt


def test_user_prompt_renders_parameters():
    prompt = build_user_prompt({
        "categories": ["история", "парки"],
        "duration": 4,
        "pace": "спокойный",
        "transportType": "пешком",
        "timeOfDay": "утро",
        "accessibility": "без ступенек",
        "preferences": "кофе",
    })
    assert "- Категории: история, парки" in prompt
    assert "- Длительность: 4 часов" in prompt
    assert "- Дополнительные пожелания: кофе" in prompt


def test_generate_returns_content():
    client = MagicMock()
    client.chat.completions.create.return_value = _response("1. Кремль")
    service = CompletionService(client=client, config=CONFIG)

    assert service.generate("sys", "user") == "1. Кремль"
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "qwen-max"
    assert kwargs["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "user"},
    ]
    assert kwargs["max_tokens"] == 3000


@pytest.mark.parametrize("response", [_response(), _response(None), _response("  \n")])
def test_unusable_response_raises_upstream_error(response):
    client = MagicMock()
    client.chat.completions.create.return_value = response
    with pytest.raises(UpstreamError):
        CompletionService(client=client, config=CONFIG).generate("sys", "user")


def test_client_error_is_wrapped():
    client = MagicMock()
    client.chat.completions.create.side_effect = TimeoutError("timed out")
    with pytest.raises(UpstreamError) as excinfo:
        CompletionService(client=client, config=CONFIG).generate("sys", "user")
    assert isinstance(excinfo.value.__cause__, TimeoutError)
