"""Async clients for the reasoning service.

The app builds one client at startup and hands it to each request through a
FastAPI dependency, so tests can swap in a fake.
"""

from abc import ABC, abstractmethod

import structlog
from anthropic import AsyncAnthropic

from fixer.config import Settings

logger = structlog.get_logger()


class ReasoningClient(ABC):
    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Send a single user prompt and return the text reply."""

    async def close(self) -> None:
        pass


class AnthropicReasoner(ReasoningClient):
    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 2000,
        timeout: float = 60.0,
    ):
        self.model = model
        self.max_tokens = max_tokens
        # No retries: a timeout surfaces as a diagnostic error
        self.client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnthropicReasoner":
        return cls(
            api_key=settings.ANTHROPIC_API_KEY,
            model=settings.ANTHROPIC_MODEL,
            max_tokens=settings.DIAGNOSIS_MAX_TOKENS,
            timeout=settings.DIAGNOSIS_TIMEOUT_SECONDS,
        )

    async def complete(self, prompt: str) -> str:
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        # Only text blocks carry the answer
        return "".join(block.text for block in response.content if block.type == "text")

    async def close(self) -> None:
        await self.client.close()
