"""
Tests for the multi-provider LLM wrapper.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
import pytest
from fakesearch.services.ai_service import AIService, SYSTEM_PROMPT, _parse_model_id, create_ai_service


def test_parse_model_id():
    assert _parse_model_id("Anthropic: claude-sonnet-4-20250514") == ("anthropic", "claude-sonnet-4-20250514")
    assert _parse_model_id("openai:gpt-4o") == ("openai", "gpt-4o")


def test_missing_key_raises():
    with pytest.raises(ValueError, match="OPENAI_API_KEY"):
        create_ai_service(model_id="openai:gpt-4o-mini")
    with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
        create_ai_service(model_id="anthropic:claude-sonnet-4-20250514")


def test_unknown_provider_raises():
    with pytest.raises(ValueError, match="Unknown AI provider"):
        AIService(model_id="gemini:flash", openai_api_key="sk-test")


@pytest.mark.anyio
async def test_openai_completion():
    svc = AIService(model_id="openai:gpt-4o-mini", openai_api_key="sk-test", timeout=5)
    create = AsyncMock(return_value=SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content='[{"title": "x"}]'))],
    ))
    svc._openai_client = MagicMock()
    svc._openai_client.chat.completions.create = create

    text = await svc.complete("write ads")

    assert text == '[{"title": "x"}]'
    kwargs = create.call_args.kwargs
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert kwargs["messages"][1] == {"role": "user", "content": "write ads"}


@pytest.mark.anyio
async def test_anthropic_completion_moves_system_prompt():
    svc = AIService(model_id="anthropic:claude-sonnet-4-20250514", anthropic_api_key="sk-ant-test")
    create = AsyncMock(return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text="[]")]))
    svc._anthropic_client = MagicMock()
    svc._anthropic_client.messages.create = create

    text = await svc.complete("write ads")

    assert text == "[]"
    kwargs = create.call_args.kwargs
    assert kwargs["system"] == SYSTEM_PROMPT
    assert kwargs["messages"] == [{"role": "user", "content": "write ads"}]
