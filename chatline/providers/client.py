"""
Provider client used by the chat orchestrator.

Builds the prompt (system message, prior history, new user message),
applies the configured model and generation parameters, bounds the call
with a timeout, and reduces every failure to a ProviderError.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from chatline.config import Settings
from chatline.core import (
    ProviderBadResponseError,
    ProviderError,
    ProviderUnavailableError,
    get_logger,
)
from chatline.db.models import Message, MessageRole
from chatline.providers.base import BaseProvider, ChatMessage, ChatRequest
from chatline.providers.openai_compat import OpenAICompatProvider

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProviderConfig:
    """Deployment parameters for the generation call."""

    base_url: str
    api_key: str
    model: str
    max_tokens: int
    temperature: float
    timeout_seconds: float
    max_retries: int
    system_prompt: str

    @classmethod
    def from_settings(cls, settings: Settings) -> ProviderConfig:
        return cls(
            base_url=settings.provider_base_url,
            api_key=settings.provider_api_key,
            model=settings.provider_model,
            max_tokens=settings.provider_max_tokens,
            temperature=settings.provider_temperature,
            timeout_seconds=settings.provider_timeout_seconds,
            max_retries=settings.provider_max_retries,
            system_prompt=settings.system_prompt,
        )


class ProviderClient:
    """Wraps a BaseProvider with a fixed prompt and generation parameters."""

    def __init__(self, provider: BaseProvider, config: ProviderConfig):
        self.provider = provider
        self.config = config

    @property
    def system_prompt(self) -> str:
        return self.config.system_prompt

    def build_messages(
        self,
        system_prompt: str,
        prior_messages: Sequence[Message],
        new_user_message: str,
    ) -> list[ChatMessage]:
        """System prompt first, then history in order, then the new input."""
        messages = [ChatMessage(role="system", content=system_prompt)]
        messages.extend(
            ChatMessage(role=message.role, content=message.content)
            for message in prior_messages
        )
        messages.append(ChatMessage(role=MessageRole.USER.value, content=new_user_message))
        return messages

    async def complete(
        self,
        system_prompt: str,
        prior_messages: Sequence[Message],
        new_user_message: str,
    ) -> str:
        """Return the completion text or raise ProviderError."""
        request = ChatRequest(
            messages=self.build_messages(system_prompt, prior_messages, new_user_message),
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )

        try:
            response = await asyncio.wait_for(
                self.provider.chat_once(request), timeout=self.config.timeout_seconds
            )
        except asyncio.TimeoutError as exc:
            raise ProviderUnavailableError(
                "Provider timed out",
                details={"timeout_seconds": self.config.timeout_seconds},
            ) from exc
        except ProviderError:
            raise
        except Exception as exc:
            logger.error("Provider call failed unexpectedly", exc_info=exc)
            raise ProviderError(
                "Provider request failed", details={"reason": type(exc).__name__}
            ) from exc

        if not response.content or not response.content.strip():
            raise ProviderBadResponseError(
                "Provider returned an empty completion",
                details={"model": response.model, "finish_reason": response.finish_reason},
            )

        logger.debug(
            "Provider completion received",
            data={
                "model": response.model,
                "finish_reason": response.finish_reason,
                "total_tokens": response.total_tokens,
            },
        )
        return response.content

    async def aclose(self) -> None:
        await self.provider.aclose()


def build_provider_client(settings: Settings) -> ProviderClient:
    """Construct the default OpenAI-compatible client from settings."""
    config = ProviderConfig.from_settings(settings)
    provider = OpenAICompatProvider(
        base_url=config.base_url,
        timeout=config.timeout_seconds,
        max_retries=config.max_retries,
        api_key=config.api_key or None,
    )
    return ProviderClient(provider, config)
