"""Port describing the outbound webhook delivery."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class WebhookPort(Protocol):
    """Deliver one chat message payload to an incoming webhook."""

    async def post(self, payload: Mapping[str, Any]) -> None:
        """Send ``payload``; raise on transport failure or non-success status."""

    async def aclose(self) -> None:
        """Release pooled connections (if any)."""


__all__ = ["WebhookPort"]
