"""Write sink forwarding structured log records to a Slack incoming webhook.

Purpose
-------
Expose the forwarder to host pipelines in both arrival shapes: an async
iterator of parsed records (processed strictly in order) and raw NDJSON byte
chunks (fanned out concurrently per chunk).

Contents
--------
* :class:`SlackWebhookTransport` - the sink.

System Role
-----------
Composition point of the per-record use case and the httpx webhook adapter.
Record failures never escape ``send``/``consume``/``write``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Iterable, Mapping
from types import TracebackType
from typing import Any

from lib_log_slack.application.ports.webhook import WebhookPort
from lib_log_slack.application.use_cases._types import DiagnosticHook, ProcessResult
from lib_log_slack.application.use_cases.forward_record import create_forward_record
from lib_log_slack.domain.options import TransportOptions

from .framing import FrameBatch, FrameSplitter
from .webhook import HttpxWebhookClient

logger = logging.getLogger(__name__)


class SlackWebhookTransport:
    """Forward log records to a Slack incoming webhook.

    Parameters
    ----------
    options:
        Resolved :class:`TransportOptions`; defaults are applied there.
    webhook:
        Optional :class:`WebhookPort`; defaults to :class:`HttpxWebhookClient`
        configured from ``options`` (persistent client when ``keep_alive``).
    diagnostic:
        Optional callback receiving pipeline milestones.

    Examples
    --------
    >>> class Recorder:
    ...     def __init__(self):
    ...         self.payloads = []
    ...     async def post(self, payload):
    ...         self.payloads.append(payload)
    ...     async def aclose(self):
    ...         pass
    >>> recorder = Recorder()
    >>> transport = SlackWebhookTransport(TransportOptions(webhook_url="https://hooks.example/x"), webhook=recorder)
    >>> asyncio.run(transport.write(b'{"msg": "a", "time": 0}\\n{"msg": "b", "time": 0}\\n'))
    >>> sorted(payload["text"] for payload in recorder.payloads)
    ['a', 'b']
    """

    def __init__(
        self,
        options: TransportOptions,
        *,
        webhook: WebhookPort | None = None,
        diagnostic: DiagnosticHook = None,
    ) -> None:
        self._options = options
        if webhook is None:
            webhook = HttpxWebhookClient(options.webhook_url, keep_alive=options.keep_alive, timeout=options.timeout)
        self._webhook = webhook
        self._diagnostic = diagnostic
        self._forward = create_forward_record(options=options, webhook=webhook, diagnostic=diagnostic)
        self._splitter = FrameSplitter()

    @property
    def options(self) -> TransportOptions:
        return self._options

    async def send(self, record: Mapping[str, Any]) -> ProcessResult:
        """Forward one parsed record."""
        return await self._forward(record)

    async def consume(self, records: AsyncIterable[Mapping[str, Any]] | Iterable[Mapping[str, Any]]) -> None:
        """Forward ``records`` one at a time, awaiting each delivery before the next."""
        if isinstance(records, AsyncIterable):
            async for record in records:
                await self._forward(record)
        else:
            for record in records:
                await self._forward(record)

    async def write(self, chunk: bytes | str) -> None:
        """Forward every record completed by ``chunk`` concurrently.

        Returns once all sends dispatched for this chunk have settled. An
        incomplete trailing record is kept until the next write or :meth:`flush`.
        """
        await self._dispatch(self._splitter.feed(chunk))

    async def flush(self) -> None:
        """Forward the buffered partial record, if any."""
        if self._splitter.pending:
            await self._dispatch(self._splitter.close())

    async def aclose(self) -> None:
        """Flush buffered input and release the webhook client."""
        try:
            await self.flush()
        finally:
            await self._webhook.aclose()

    async def __aenter__(self) -> "SlackWebhookTransport":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _dispatch(self, batch: FrameBatch) -> None:
        for frame in batch.rejected:
            logger.error("Dropping unparseable log frame (%d chars)", len(frame))
            self._emit("frame_rejected", {"length": len(frame)})
        if not batch.records:
            return
        async with asyncio.TaskGroup() as group:
            for record in batch.records:
                group.create_task(self._forward(record))

    def _emit(self, name: str, payload: dict[str, Any]) -> None:
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as diagnostic_exc:  # noqa: BLE001
            logger.error("Diagnostic hook raised while reporting %s", name, exc_info=diagnostic_exc)


__all__ = ["SlackWebhookTransport"]
