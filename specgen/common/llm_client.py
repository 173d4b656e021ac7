"""Chat-completion client — one request per call, failures classified, never retried."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

import httpx

from specgen.common.errors import (
    AuthFailure,
    MalformedResponse,
    NoCompletion,
    ProviderError,
    TransportFailure,
)
from specgen.common.protocol import Message

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o"

# Status codes that mean the credential itself was rejected
_AUTH_STATUSES = (401, 403)


class CompletionClient(Protocol):
    """Anything that turns an ordered message list into one reply text."""

    async def send(self, messages: Sequence[Message]) -> str: ...


@dataclass
class Completion:
    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)


def _preview(text: str, width: int) -> str:
    return text if len(text) <= width else f"{text[:width]}..."


def _provider_error(status: int, body: str) -> ProviderError:
    """Build a ProviderError from an error body, preferring the ``{"error": {...}}`` shape."""
    try:
        detail = json.loads(body)["error"]
        message = detail["message"]
    except (ValueError, KeyError, TypeError):
        return ProviderError(f"HTTP status {status}: {_preview(body, 100)}")
    return ProviderError(f"{message} (Type: {detail.get('type') or 'unknown'})")


def parse_completion(data: Any, model: str) -> Completion:
    """Extract ``choices[0].message.content`` from a decoded response body."""
    if not isinstance(data, dict) or not isinstance(data.get("choices"), list):
        raise MalformedResponse("response has no 'choices' list")

    choices = data["choices"]
    if not choices:
        raise NoCompletion()

    try:
        content = choices[0]["message"]["content"]
    except (KeyError, TypeError):
        raise MalformedResponse("first choice has no message content")
    if not isinstance(content, str):
        raise MalformedResponse("first choice content is not text")
    if not content:
        raise NoCompletion("The API returned an empty completion")

    usage = data.get("usage")
    reported_model = data.get("model")
    return Completion(
        content=content,
        model=reported_model if isinstance(reported_model, str) else model,
        usage=usage if isinstance(usage, dict) else {},
    )


class ChatCompletionClient:
    """OpenAI-compatible ``/chat/completions`` client.

    Performs exactly one HTTP round trip per :meth:`send`. Errors are raised
    as :class:`~specgen.common.errors.CompletionError` subclasses so the
    caller decides what a failure means for the conversation.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        endpoint: str = DEFAULT_ENDPOINT,
        temperature: float = 0.7,
        max_tokens: int | None = 1000,
        timeout: float = 120.0,
        logger: logging.Logger | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self.model = model
        self.endpoint = endpoint
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.log = logger or logging.getLogger(__name__)
        self._http = http or httpx.AsyncClient(timeout=timeout)

    # ─── Public API ───────────────────────────────────────────────────

    async def send(self, messages: Sequence[Message]) -> str:
        completion = await self.complete(messages)
        return completion.content

    async def complete(self, messages: Sequence[Message]) -> Completion:
        body = self._build_body(messages)
        self._log_request(messages, body)

        try:
            resp = await self._http.post(
                self.endpoint,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                json=body,
            )
        except httpx.TransportError as e:
            self.log.debug("Transport error talking to %s: %s", self.endpoint, e)
            raise TransportFailure(f"Could not reach {self.endpoint}: {type(e).__name__}") from e

        self.log.debug("Received response with status code: %d", resp.status_code)

        if resp.status_code in _AUTH_STATUSES:
            self.log.debug("Error response: %s", _preview(resp.text, 200))
            raise AuthFailure("The API key was rejected by the provider")
        if not resp.is_success:
            self.log.debug("Error response: %s", _preview(resp.text, 200))
            raise _provider_error(resp.status_code, resp.text)

        self.log.debug("Raw response: %s", _preview(resp.text, 200))
        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponse(f"response body is not JSON: {e}") from e

        completion = parse_completion(data, self.model)
        self._log_usage(completion)
        return completion

    async def close(self) -> None:
        await self._http.aclose()

    # ─── Internals ────────────────────────────────────────────────────

    def _build_body(self, messages: Sequence[Message]) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_wire() for m in messages],
            "temperature": self.temperature,
        }
        if self.max_tokens is not None:
            body["max_tokens"] = self.max_tokens
        return body

    def _log_request(self, messages: Sequence[Message], body: dict[str, Any]) -> None:
        if not self.log.isEnabledFor(logging.DEBUG):
            return
        self.log.debug("Sending to endpoint: %s", self.endpoint)
        self.log.debug("Using model: %s", self.model)
        self.log.debug("Message count: %d", len(messages))
        for index, message in enumerate(messages):
            self.log.debug("Message [%d] %s: %s", index, message.role.value, message.preview())
        request_json = json.dumps(body, indent=2, sort_keys=True, ensure_ascii=False)
        self.log.debug("Request JSON (first 500 chars):\n%s", _preview(request_json, 500))

    def _log_usage(self, completion: Completion) -> None:
        self.log.debug("Response model: %s", completion.model)
        usage = completion.usage
        if not usage:
            return
        self.log.debug(
            "Token usage - Prompt: %s, Completion: %s, Total: %s",
            usage.get("prompt_tokens", 0),
            usage.get("completion_tokens", 0),
            usage.get("total_tokens", 0),
        )
