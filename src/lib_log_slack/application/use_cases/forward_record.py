"""Use case forwarding a single record to the webhook (format-and-send).

Purpose
-------
Combine payload building and delivery behind one per-record boundary that
never raises: failures are logged, reported to the diagnostic hook, and
returned as a result dictionary.

Contents
--------
* :class:`ForwardRecord` - callable executing the operation.
* :func:`create_forward_record` - factory freezing options and collaborators.

System Role
-----------
Invoked by :class:`lib_log_slack.adapters.transport.SlackWebhookTransport` for
every record regardless of the arrival shape (iterator or buffer).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from lib_log_slack.application.ports.webhook import WebhookPort
from lib_log_slack.domain.options import TransportOptions

from ._types import DiagnosticHook, ProcessResult
from .build_payload import build_payload

logger = logging.getLogger(__name__)


class ForwardRecord:
    """Format one record and post it, swallowing every failure."""

    def __init__(self, *, options: TransportOptions, webhook: WebhookPort, diagnostic: DiagnosticHook = None) -> None:
        self._options = options
        self._webhook = webhook
        self._diagnostic = diagnostic

    async def __call__(self, record: Mapping[str, Any]) -> ProcessResult:
        try:
            payload = build_payload(record, self._options)
        except Exception as exc:  # noqa: BLE001
            logger.error("Dropping malformed log record: %s", exc, exc_info=exc)
            return self._failed("malformed_record", exc)

        try:
            await self._webhook.post(payload)
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to deliver log record to Slack webhook: %s", exc, exc_info=exc)
            return self._failed("delivery_failed", exc)

        self._emit("record_forwarded", {"attachments": len(payload.get("attachments", ()))})
        return {"ok": True}

    def _failed(self, reason: str, exc: Exception) -> ProcessResult:
        self._emit("record_failed", {"reason": reason, "exception": repr(exc)})
        return {"ok": False, "reason": reason}

    def _emit(self, name: str, payload: dict[str, Any]) -> None:
        """Invoke the diagnostic hook while guarding against callback failures."""

        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as diagnostic_exc:  # noqa: BLE001
            logger.error("Diagnostic hook raised while reporting %s", name, exc_info=diagnostic_exc)


def create_forward_record(
    *,
    options: TransportOptions,
    webhook: WebhookPort,
    diagnostic: DiagnosticHook = None,
) -> ForwardRecord:
    """Build the per-record forward callable.

    Parameters
    ----------
    options:
        Resolved :class:`TransportOptions`.
    webhook:
        Adapter implementing :class:`WebhookPort`.
    diagnostic:
        Optional callback receiving ``record_forwarded``/``record_failed``.

    Examples
    --------
    >>> import asyncio
    >>> class Recorder:
    ...     def __init__(self):
    ...         self.payloads = []
    ...     async def post(self, payload):
    ...         self.payloads.append(payload)
    ...     async def aclose(self):
    ...         pass
    >>> webhook = Recorder()
    >>> forward = create_forward_record(options=TransportOptions(webhook_url="https://hooks.example/x"), webhook=webhook)
    >>> asyncio.run(forward({"msg": "hi", "time": 0, "level": 30}))
    {'ok': True}
    >>> webhook.payloads[0]["text"]
    'hi'
    """

    return ForwardRecord(options=options, webhook=webhook, diagnostic=diagnostic)


__all__ = ["ForwardRecord", "create_forward_record"]
