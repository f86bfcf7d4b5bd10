"""httpx-backed delivery of Slack incoming-webhook payloads.

Purpose
-------
Implement :class:`WebhookPort` with one JSON POST per payload, optionally over
a single persistent connection pool.

Contents
--------
* :class:`HttpxWebhookClient` - concrete :class:`WebhookPort` implementation.

System Role
-----------
Outermost network boundary of the forwarder. Response bodies are ignored; a
non-success status raises :class:`httpx.HTTPStatusError` so the use case can
log and drop the record.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import httpx

from lib_log_slack.application.ports.webhook import WebhookPort

JSON_HEADERS = {"Content-Type": "application/json"}


class HttpxWebhookClient(WebhookPort):
    """POST payloads to an incoming webhook URL.

    Parameters
    ----------
    url:
        Webhook endpoint. Not validated here; httpx rejects bad URLs on send.
    keep_alive:
        When ``True`` one :class:`httpx.AsyncClient` is created immediately and
        shared by every post. Otherwise each post opens and closes its own.
    timeout:
        Seconds before httpx gives up; ``None`` disables timeouts.
    transport:
        Optional httpx transport, e.g. :class:`httpx.MockTransport` in tests.
    """

    def __init__(
        self,
        url: str,
        *,
        keep_alive: bool = False,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport
        self._client: httpx.AsyncClient | None = self._new_client() if keep_alive else None

    @property
    def keep_alive(self) -> bool:
        return self._client is not None

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def post(self, payload: Mapping[str, Any]) -> None:
        """Send ``payload`` as JSON and raise for non-success statuses."""
        body = json.dumps(payload, default=str)
        if self._client is not None:
            response = await self._client.post(self._url, content=body, headers=JSON_HEADERS)
        else:
            async with self._new_client() as client:
                response = await client.post(self._url, content=body, headers=JSON_HEADERS)
        response.raise_for_status()

    async def aclose(self) -> None:
        """Close the persistent client when one was created."""
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()


__all__ = ["HttpxWebhookClient"]
