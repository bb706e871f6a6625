"""Chat-completion transport."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from rule_screening.completion.models import CompletionOptions, CompletionResponse
from rule_screening.errors import ProtocolError, TransportError

logger = logging.getLogger(__name__)


class ICompletionClient(ABC):
    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str) -> CompletionResponse:
        raise NotImplementedError


class HttpCompletionClient(ICompletionClient):
    """OpenAI-style chat completions over httpx with a bearer credential.

    One request per call; retries are left to the caller.
    """

    def __init__(
        self,
        api_key: str,
        options: Optional[CompletionOptions] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._options = options or CompletionOptions()
        self._client = httpx.AsyncClient(
            timeout=self._options.timeout,
            transport=transport,
        )

    @property
    def options(self) -> CompletionOptions:
        return self._options

    async def __aenter__(self) -> "HttpCompletionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_payload(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        return {
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "model": self._options.model,
            "temperature": self._options.temperature,
            "max_tokens": self._options.max_tokens,
            "top_p": self._options.top_p,
        }

    async def complete(self, system_prompt: str, user_prompt: str) -> CompletionResponse:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        try:
            response = await self._client.post(
                self._options.endpoint,
                json=self.build_payload(system_prompt, user_prompt),
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        logger.debug("Response status: %s", response.status_code)
        try:
            body = response.json()
        except ValueError:
            body = None
        return CompletionResponse(
            status_code=response.status_code,
            reason=response.reason_phrase,
            body=body,
        )


def extract_completion_text(body: Any) -> str:
    """Return the first choice's message content."""
    if not isinstance(body, dict):
        raise ProtocolError("Response body is not a JSON object")
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        raise ProtocolError("Response has no choices")
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise ProtocolError("Response choice has no message content")
    return content
