"""
Base provider interface.

Defines the contract a text-generation backend must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class ChatMessage:
    """A single chat message."""

    role: str  # "system", "user", "assistant"
    content: str


@dataclass
class ChatRequest:
    """Request for chat completion."""

    messages: list[ChatMessage]
    model: str
    temperature: float = 0.7
    max_tokens: int | None = None


@dataclass
class ChatResponse:
    """Complete chat response (non-streaming)."""

    content: str
    model: str
    finish_reason: str | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class BaseProvider(ABC):
    """Abstract base class for text-generation providers."""

    async def aclose(self) -> None:
        """Close any underlying resources (optional)."""
        return None

    @abstractmethod
    async def healthcheck(self) -> bool:
        """
        Check if the provider is available and responding.

        Returns:
            True if provider is healthy, False otherwise
        """
        ...

    @abstractmethod
    async def chat_once(self, request: ChatRequest) -> ChatResponse:
        """
        Send a chat request and wait for complete response.

        Args:
            request: ChatRequest with messages and parameters

        Returns:
            Complete ChatResponse

        Raises:
            ProviderError: If the provider fails in any way
        """
        ...
