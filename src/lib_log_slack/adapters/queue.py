"""Thread-backed record queue feeding the async forwarder.

Purpose
-------
Let synchronous producers (stdlib :mod:`logging` handlers) hand records to the
async webhook transport without blocking on the network.

Contents
--------
* :class:`RecordQueue` - background worker owning its own event loop.

System Role
-----------
The worker thread drains records in arrival order and awaits each delivery
before taking the next one, so a slow webhook delays later records but never
the producer (unless the ``block`` policy is active and the queue is full).
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import queue
import threading
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from lib_log_slack.application.use_cases._types import DiagnosticHook

LOGGER = logging.getLogger(__name__)

Record = Mapping[str, Any]
Worker = Callable[[Record], Awaitable[Any] | Any]

_STOP = object()


class RecordQueue:
    """Process records on a background thread with a private event loop.

    Examples
    --------
    >>> processed = []
    >>> async def worker(record):
    ...     processed.append(record["msg"])
    >>> records = RecordQueue(worker=worker)
    >>> records.start()
    >>> records.put({"msg": "hello"})
    True
    >>> records.stop(drain=True)
    >>> processed
    ['hello']
    """

    def __init__(
        self,
        *,
        worker: Worker,
        maxsize: int = 2048,
        drop_policy: str = "block",
        on_drop: Callable[[Record], None] | None = None,
        timeout: float | None = 1.0,
        stop_timeout: float | None = 5.0,
        on_stop: Callable[[], Awaitable[Any]] | None = None,
        diagnostic: DiagnosticHook = None,
    ) -> None:
        """Create the queue.

        Parameters
        ----------
        worker:
            Callable invoked for each record; awaitable results are awaited on
            the worker's event loop before the next record is taken.
        maxsize:
            Maximum number of queued records before the drop policy applies.
        drop_policy:
            ``"block"`` (producers wait up to ``timeout``) or ``"drop"``
            (records are rejected immediately when the queue is full).
        on_drop:
            Optional callback invoked with every dropped record.
        timeout:
            Producer wait under the blocking policy; ``None`` waits forever.
        stop_timeout:
            Default drain deadline for :meth:`stop`; ``None`` waits forever.
        on_stop:
            Coroutine factory run on the worker loop just before the thread
            exits, e.g. closing a persistent HTTP client.
        """
        policy = drop_policy.lower()
        if policy not in {"block", "drop"}:
            raise ValueError("drop_policy must be 'block' or 'drop'")
        self._worker = worker
        self._queue: queue.Queue[Any] = queue.Queue(maxsize=maxsize)
        self._thread: threading.Thread | None = None
        self._drop_policy = policy
        self._on_drop = on_drop
        self._timeout = timeout
        self._stop_timeout = stop_timeout
        self._on_stop = on_stop
        self._diagnostic = diagnostic
        self._drop_pending = False
        self._idle = threading.Event()
        self._idle.set()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background worker thread if it is not already running."""
        if self.running:
            return
        self._drop_pending = False
        self._thread = threading.Thread(target=self._run, name="lib-log-slack-queue", daemon=True)
        self._thread.start()

    def put(self, record: Record) -> bool:
        """Enqueue ``record``; return ``False`` when the drop policy rejected it."""
        try:
            if self._drop_policy == "drop":
                self._queue.put(record, block=False)
            else:
                self._queue.put(record, timeout=self._timeout)
        except queue.Full:
            self._handle_drop(record, "queue_full")
            return False
        self._idle.clear()
        return True

    def stop(self, *, drain: bool = True, timeout: float | None = None) -> None:
        """Stop the worker thread, optionally draining queued records first.

        Raises
        ------
        RuntimeError
            When the worker does not finish within the deadline.
        """
        thread = self._thread
        if thread is None:
            return
        effective_timeout = timeout if timeout is not None else self._stop_timeout
        deadline = time.monotonic() + effective_timeout if effective_timeout is not None else None

        def remaining_time() -> float | None:
            if deadline is None:
                return None
            return max(0.0, deadline - time.monotonic())

        if not drain:
            self._drop_pending = True
        try:
            self._queue.put(_STOP, timeout=remaining_time())
        except queue.Full:
            pass
        else:
            thread.join(remaining_time())
        if thread.is_alive():
            self._emit_diagnostic("queue_shutdown_timeout", {"timeout": effective_timeout})
            raise RuntimeError("Record queue worker failed to stop within the allotted timeout")
        self._thread = None

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until every queued record was processed or ``timeout`` elapses."""
        if self._queue.unfinished_tasks == 0:
            return True
        return self._idle.wait(timeout)

    def _run(self) -> None:
        """Worker loop draining the queue until the stop sentinel arrives."""
        with asyncio.Runner() as runner:
            while True:
                item = self._queue.get()
                try:
                    if item is _STOP:
                        break
                    if self._drop_pending:
                        self._handle_drop(item, "shutdown")
                        continue
                    self._process(runner, item)
                finally:
                    self._queue.task_done()
                    if self._queue.unfinished_tasks == 0:
                        self._idle.set()
            if self._on_stop is not None:
                try:
                    runner.run(self._on_stop())
                except Exception as exc:  # noqa: BLE001
                    LOGGER.error("Record queue stop hook raised an exception", exc_info=exc)

    def _process(self, runner: asyncio.Runner, record: Record) -> None:
        try:
            result = self._worker(record)
            if inspect.isawaitable(result):
                runner.run(_await(result))
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Record queue worker raised an exception; continuing", exc_info=exc)
            self._emit_diagnostic("queue_worker_error", {"exception": repr(exc)})

    def _handle_drop(self, record: Record, reason: str) -> None:
        """Invoke the drop callback when the queue rejects a record."""
        self._emit_diagnostic("queue_dropped", {"reason": reason})
        if self._on_drop is None:
            return
        try:
            self._on_drop(record)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Queue drop handler raised an exception; continuing", exc_info=exc)

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        """Invoke the diagnostic hook while guarding against callback failures."""
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as diagnostic_exc:  # noqa: BLE001
            LOGGER.error("Queue diagnostic hook raised while reporting %s", name, exc_info=diagnostic_exc)


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


__all__ = ["RecordQueue"]
