"""
AI Service — Multi-provider text generation (OpenAI GPT, Anthropic Claude).
Used for ad-copy drafting; one request per call, bounded timeout, no retries.
"""

import logging
from typing import Optional
from openai import AsyncOpenAI
from anthropic import AsyncAnthropic
from fakesearch.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

SYSTEM_PROMPT = """You are an expert Google Ads copywriter for paid search campaigns.
You write short, compliant responsive search ad copy that respects strict character limits
and always answer with the exact JSON structure requested, with no commentary."""


def _parse_model_id(model_id: Optional[str]) -> tuple[str, str]:
    """Parse 'provider:model' into (provider, model). Fallback to whichever key is configured."""
    if model_id and ":" in model_id:
        p, m = model_id.split(":", 1)
        return (p.strip().lower(), m.strip())
    if not settings.openai_api_key and settings.anthropic_api_key:
        return ("anthropic", settings.anthropic_model)
    return ("openai", settings.openai_model)


class AIService:
    """Thin async wrapper over the OpenAI and Anthropic SDKs."""

    def __init__(
        self,
        model_id: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.provider, self.model = _parse_model_id(model_id or settings.ai_model_id)
        self.timeout = timeout if timeout is not None else settings.ai_timeout_seconds
        self._openai_client: Optional[AsyncOpenAI] = None
        self._anthropic_client: Optional[AsyncAnthropic] = None

        # Use passed keys, else env
        openai_key = openai_api_key or settings.openai_api_key
        anthropic_key = anthropic_api_key or settings.anthropic_api_key

        if self.provider == "openai":
            if not openai_key:
                raise ValueError("OPENAI_API_KEY not configured.")
            self._openai_client = AsyncOpenAI(api_key=openai_key, timeout=self.timeout, max_retries=0)
        elif self.provider == "anthropic":
            if not anthropic_key:
                raise ValueError("ANTHROPIC_API_KEY not configured.")
            self._anthropic_client = AsyncAnthropic(api_key=anthropic_key, timeout=self.timeout, max_retries=0)
        else:
            raise ValueError(f"Unknown AI provider: {self.provider}")

    async def _completion(
        self,
        messages: list[dict],
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> str:
        """Call the appropriate provider's completion API."""
        if self.provider == "openai":
            response = await self._openai_client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
            return response.choices[0].message.content or ""

        # Anthropic: system prompt travels separately
        system = ""
        anthropic_messages = []
        for m in messages:
            role = m.get("role", "user")
            content = m.get("content", "")
            if role == "system":
                system += content + "\n\n" if content else ""
            else:
                anthropic_messages.append({"role": "user" if role == "user" else "assistant", "content": content})

        response = await self._anthropic_client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system.strip(),
            messages=anthropic_messages,
            temperature=temperature,
        )
        if response.content and response.content[0].type == "text":
            return response.content[0].text
        return ""

    async def complete(self, prompt: str, temperature: float = 0.7) -> str:
        """Single-turn completion with the copywriter system prompt."""
        return await self._completion(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
        )


def create_ai_service(
    model_id: Optional[str] = None,
    openai_api_key: Optional[str] = None,
    anthropic_api_key: Optional[str] = None,
) -> AIService:
    """Factory function to create an AI service instance. Raises ValueError when no key is configured."""
    return AIService(
        model_id=model_id,
        openai_api_key=openai_api_key,
        anthropic_api_key=anthropic_api_key,
    )
