from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from lib_log_slack.domain.options import TransportOptions

WEBHOOK_URL = "https://hooks.slack.example/services/T000/B000/XXXX"


class RecordingWebhook:
    """In-memory :class:`WebhookPort` capturing every payload."""

    def __init__(self, fail_when: Callable[[Mapping[str, Any]], bool] | None = None) -> None:
        self.payloads: list[Mapping[str, Any]] = []
        self.attempts = 0
        self.closed = False
        self._fail_when = fail_when

    async def post(self, payload: Mapping[str, Any]) -> None:
        self.attempts += 1
        if self._fail_when is not None and self._fail_when(payload):
            raise ConnectionError("simulated network failure")
        self.payloads.append(payload)

    async def aclose(self) -> None:
        self.closed = True

    @property
    def texts(self) -> list[str | None]:
        return [payload.get("text") for payload in self.payloads]


@pytest.fixture
def options() -> TransportOptions:
    return TransportOptions(webhook_url=WEBHOOK_URL)


@pytest.fixture
def webhook() -> RecordingWebhook:
    return RecordingWebhook()


@pytest.fixture
def recording_webhook_factory() -> type[RecordingWebhook]:
    return RecordingWebhook


@pytest.fixture
def sample_record() -> dict[str, Any]:
    return {"msg": "hello", "time": 1700000000000, "level": 30, "hostname": "h1", "pid": 1, "user": "a"}
