"""Client for the OpenAI-compatible chat-completions gateway."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog

log = structlog.get_logger()

COMPLETIONS_PATH = "/v1/chat/completions"

# Gateway statuses relayed to the caller with a readable message
_STATUS_MESSAGES = {
    429: "Rate limited. Please wait a moment.",
    402: "AI credits exhausted.",
}


class GatewayError(Exception):
    """Raised when the gateway cannot serve a completion."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(message)

    @property
    def client_status(self) -> int:
        """HTTP status to report to our own caller.

        Rate-limit and credit errors pass through; an unreachable gateway is
        502; everything else is a 500.
        """
        if self.status in _STATUS_MESSAGES or self.status == 502:
            return self.status
        return 500


def _error_for(response: httpx.Response) -> GatewayError:
    status = response.status_code
    message = _STATUS_MESSAGES.get(status, f"AI gateway error: {status}")
    return GatewayError(status, message)


def _unreachable(exc: httpx.HTTPError) -> GatewayError:
    reason = str(exc) or type(exc).__name__
    log.error("gateway_connection_error", error=reason, error_type=type(exc).__name__)
    return GatewayError(502, f"AI gateway unreachable: {reason}")


class GatewayClient:
    """Thin wrapper over an httpx client bound to the gateway base URL."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        model: str,
        timeout: float = 120.0,
    ) -> None:
        self.http_client = http_client
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise GatewayError(500, "Gateway API key not configured")
        return {
            "authorization": f"Bearer {self.api_key}",
            "content-type": "application/json",
        }

    def _body(self, messages: list[dict[str, str]], stream: bool) -> dict[str, Any]:
        body: dict[str, Any] = {"model": self.model, "messages": messages}
        if stream:
            body["stream"] = True
        return body

    async def complete(self, messages: list[dict[str, str]]) -> str:
        """Run a non-streaming completion, return the first choice's text."""
        headers = self._headers()
        try:
            response = await self.http_client.post(
                COMPLETIONS_PATH,
                json=self._body(messages, stream=False),
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise _unreachable(exc) from exc

        if not response.is_success:
            log.error(
                "gateway_error",
                status=response.status_code,
                body=response.text[:500],
            )
            raise _error_for(response)

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError):
            log.error("gateway_unexpected_response", body=response.text[:500])
            content = ""
        log.debug("gateway_completion", chars=len(content), model=self.model)
        return content

    @asynccontextmanager
    async def stream(
        self, messages: list[dict[str, str]],
    ) -> AsyncIterator[httpx.Response]:
        """Open a streaming completion; yields the response once headers are in.

        Failures before the headers arrive raise GatewayError. Errors while
        the caller reads the body are left to the caller.
        """
        request = self.http_client.build_request(
            "POST",
            COMPLETIONS_PATH,
            json=self._body(messages, stream=True),
            headers=self._headers(),
            timeout=self.timeout,
        )
        try:
            response = await self.http_client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise _unreachable(exc) from exc

        try:
            if not response.is_success:
                try:
                    await response.aread()
                    body = response.text[:500]
                except httpx.HTTPError as exc:
                    body = f"<unreadable: {exc}>"
                log.error("gateway_error", status=response.status_code, body=body)
                raise _error_for(response)
            yield response
        finally:
            await response.aclose()
