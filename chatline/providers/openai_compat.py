"""OpenAI-compatible provider adapter (OpenRouter, LM Studio, vLLM, ...)."""

from __future__ import annotations

from typing import Any

import httpx

from chatline.core import ProviderBadResponseError, ProviderError, get_logger
from chatline.providers.base import BaseProvider, ChatRequest, ChatResponse
from chatline.providers.http_client import (
    create_http_client,
    parse_json,
    raise_for_status,
    request_with_retries,
)

logger = get_logger(__name__)


class OpenAICompatProvider(BaseProvider):
    """Adapter for endpoints that speak the /chat/completions dialect."""

    def __init__(
        self,
        base_url: str,
        timeout: float,
        max_retries: int,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self._client = create_http_client(
            self.base_url, timeout, headers=headers, transport=transport
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def healthcheck(self) -> bool:
        try:
            response = await request_with_retries(
                self._client, "GET", "/models", max_retries=0
            )
            raise_for_status(response)
            return True
        except ProviderError as exc:
            logger.warning("Provider healthcheck failed", data={"error": exc.message})
            return False

    async def chat_once(self, request: ChatRequest) -> ChatResponse:
        payload: dict[str, Any] = {
            "model": request.model,
            "messages": [
                {"role": message.role, "content": message.content}
                for message in request.messages
            ],
            "temperature": request.temperature,
            "stream": False,
        }
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens

        response = await request_with_retries(
            self._client,
            "POST",
            "/chat/completions",
            max_retries=self.max_retries,
            json=payload,
        )
        raise_for_status(response)
        return self._parse_completion(parse_json(response), request.model)

    @staticmethod
    def _parse_completion(data: Any, requested_model: str) -> ChatResponse:
        if not isinstance(data, dict):
            raise ProviderBadResponseError(details={"reason": "body is not an object"})

        # Some gateways report upstream failures with a 200 and an error body
        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ProviderError("Provider error", details={"reason": message})

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ProviderBadResponseError(details={"reason": "no choices returned"})

        choice = choices[0] if isinstance(choices[0], dict) else {}
        message = choice.get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ProviderBadResponseError(details={"reason": "completion has no content"})

        usage = data.get("usage") or {}
        return ChatResponse(
            content=content,
            model=data.get("model") or requested_model,
            finish_reason=choice.get("finish_reason"),
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        )
