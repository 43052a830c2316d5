from __future__ import annotations

from typing import Any

import httpx

from observability import get_logger

log = get_logger(__name__)


class AgentTransportError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _provider_error_message(response: httpx.Response) -> str:
    message = response.text.strip()
    try:
        payload = response.json()
    except (ValueError, RecursionError):
        payload = None
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict):
            msg = err.get("message")
            if isinstance(msg, str) and msg.strip():
                return msg.strip()
        if isinstance(err, str) and err.strip():
            return err.strip()
        msg = payload.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return message or f"HTTP {response.status_code}"


class AgentGatewayClient:
    """Posts one user turn to the agent gateway and returns the raw envelope."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def call(self, text: str, agent_id: str, options: dict[str, str] | None = None) -> Any:
        payload: dict[str, Any] = {"message": text, "agent_id": agent_id, **(options or {})}
        timeout = httpx.Timeout(self.timeout_seconds, connect=8.0)
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.post(self.base_url, headers=self._headers(), json=payload)
        except httpx.TimeoutException as exc:
            raise AgentTransportError("Agent gateway timed out.") from exc
        except httpx.HTTPError as exc:
            raise AgentTransportError(f"Failed to reach agent gateway: {exc}") from exc

        if response.status_code >= 400:
            raise AgentTransportError(_provider_error_message(response), status_code=response.status_code)

        log.debug("agent_gateway.response", status_code=response.status_code, bytes=len(response.content))
        try:
            return response.json()
        except (ValueError, RecursionError):
            return response.text
