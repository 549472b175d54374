"""Text-generation provider interfaces and implementations."""

from chatline.providers.base import (
    BaseProvider,
    ChatMessage,
    ChatRequest,
    ChatResponse,
)
from chatline.providers.client import ProviderClient, ProviderConfig, build_provider_client
from chatline.providers.openai_compat import OpenAICompatProvider

__all__ = [
    "BaseProvider",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "OpenAICompatProvider",
    "ProviderClient",
    "ProviderConfig",
    "build_provider_client",
]
