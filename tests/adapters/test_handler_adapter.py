from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import pytest

from lib_log_slack.adapters.handler import SlackWebhookHandler
from lib_log_slack.domain.options import TransportOptions


@pytest.fixture
def handler(options: TransportOptions, webhook: Any) -> Iterator[SlackWebhookHandler]:
    slack_handler = SlackWebhookHandler(options, webhook=webhook)
    yield slack_handler
    slack_handler.close()


@pytest.fixture
def app_logger(handler: SlackWebhookHandler) -> Iterator[logging.Logger]:
    logger = logging.getLogger("tests.slack.app")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(handler)
    yield logger
    logger.removeHandler(handler)
    logger.propagate = True


def test_warning_is_forwarded_with_level_colour_and_extras(
    app_logger: logging.Logger, handler: SlackWebhookHandler, webhook: Any
) -> None:
    app_logger.warning("disk %s nearly full", "/var", extra={"user": "ann"})
    handler.flush()

    payload = webhook.payloads[0]
    assert payload["text"] == "disk /var nearly full"
    attachment = payload["attachments"][0]
    assert attachment["color"] == "#ECB22E"
    assert attachment["fields"] == [
        {"title": "name", "value": "tests.slack.app", "short": True},
        {"title": "user", "value": "ann", "short": True},
    ]


def test_to_structured_uses_json_logger_levels_and_epoch_millis(handler: SlackWebhookHandler) -> None:
    record = logging.LogRecord("svc", logging.ERROR, __file__, 1, "failed", (), None)

    data = handler.to_structured(record)

    assert data["level"] == 50
    assert data["time"] == int(record.created * 1000)
    assert data["msg"] == "failed"
    assert data["name"] == "svc"
    assert {"hostname", "pid"} <= set(data)


def test_to_structured_honours_message_key(options: TransportOptions, webhook: Any) -> None:
    custom = SlackWebhookHandler(options.replace(message_key="message"), webhook=webhook)
    try:
        data = custom.to_structured(logging.LogRecord("svc", logging.INFO, __file__, 1, "hi", (), None))
    finally:
        custom.close()

    assert data["message"] == "hi"
    assert "msg" not in data


def test_exception_info_becomes_err_binding(
    app_logger: logging.Logger, handler: SlackWebhookHandler, webhook: Any
) -> None:
    try:
        raise ValueError("bad input")
    except ValueError:
        app_logger.exception("request failed")
    handler.flush()

    titles = {field["title"]: field["value"] for field in webhook.payloads[0]["attachments"][0]["fields"]}
    assert titles["err.type"] == "ValueError"
    assert titles["err.message"] == "bad input"
    assert "Traceback" in titles["err.stack"]
    assert webhook.payloads[0]["attachments"][0]["color"] == "#E01E5A"


def test_records_from_own_and_http_loggers_are_ignored(handler: SlackWebhookHandler, webhook: Any) -> None:
    for name in ("lib_log_slack.adapters.transport", "httpx", "httpcore.connection", "asyncio"):
        handler.handle(logging.LogRecord(name, logging.ERROR, __file__, 1, "internal", (), None))
    handler.handle(logging.LogRecord("lib_log_slack_consumer", logging.ERROR, __file__, 1, "external", (), None))
    handler.flush()

    assert webhook.texts == ["external"]


def test_handler_level_filters_records(options: TransportOptions, webhook: Any) -> None:
    strict = SlackWebhookHandler(options, level=logging.ERROR, webhook=webhook)
    logger = logging.getLogger("tests.slack.strict")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(strict)
    try:
        logger.info("quiet")
        logger.error("loud")
        strict.flush()
    finally:
        logger.removeHandler(strict)
        logger.propagate = True
        strict.close()

    assert webhook.texts == ["loud"]


def test_close_drains_queue_and_closes_webhook(options: TransportOptions, webhook: Any) -> None:
    slack_handler = SlackWebhookHandler(options, webhook=webhook)
    for index in range(10):
        slack_handler.handle(logging.LogRecord("svc", logging.INFO, __file__, 1, f"m{index}", (), None))

    slack_handler.close()

    assert webhook.texts == [f"m{index}" for index in range(10)]
    assert webhook.closed is True


def test_delivery_failures_do_not_reach_the_caller(options: TransportOptions, recording_webhook_factory: Any) -> None:
    failing = recording_webhook_factory(fail_when=lambda payload: True)
    slack_handler = SlackWebhookHandler(options, webhook=failing)
    try:
        slack_handler.handle(logging.LogRecord("svc", logging.ERROR, __file__, 1, "lost", (), None))
        slack_handler.flush()
    finally:
        slack_handler.close()

    assert failing.attempts == 1
