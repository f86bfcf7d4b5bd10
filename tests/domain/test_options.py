from __future__ import annotations

import dataclasses

import pytest

from lib_log_slack.domain.levels import DEFAULT_COLORS
from lib_log_slack.domain.options import DEFAULT_EXCLUDED_KEYS, TransportOptions

URL = "https://hooks.example/services/x"


def test_defaults_match_documented_values() -> None:
    options = TransportOptions(webhook_url=URL)

    assert options.channel_key is None
    assert options.colors == DEFAULT_COLORS
    assert options.excluded_keys == DEFAULT_EXCLUDED_KEYS == frozenset({"hostname", "pid"})
    assert options.image_url_key is None
    assert options.message_key == "msg"
    assert options.keep_alive is False
    assert options.max_message_chars == 2500
    assert options.max_depth == 20
    assert options.timeout is None


def test_options_are_immutable_and_freeze_inputs() -> None:
    colors = {30: "#000000"}
    options = TransportOptions(webhook_url=URL, colors=colors, excluded_keys=["secret"])
    colors[30] = "#FFFFFF"

    assert options.colors[30] == "#000000"
    assert options.excluded_keys == frozenset({"secret"})
    with pytest.raises(dataclasses.FrozenInstanceError):
        options.webhook_url = "other"  # type: ignore[misc]


def test_single_excluded_key_string_is_not_split_into_characters() -> None:
    assert TransportOptions(webhook_url=URL, excluded_keys="pid").excluded_keys == frozenset({"pid"})


def test_empty_excluded_keys_disable_exclusion() -> None:
    assert TransportOptions(webhook_url=URL, excluded_keys=()).excluded_keys == frozenset()


def test_from_mapping_accepts_camel_case_aliases() -> None:
    options = TransportOptions.from_mapping(
        {
            "webhookUrl": URL,
            "channelKey": "channel",
            "imageUrlKey": "image",
            "messageKey": "message",
            "keepAlive": True,
            "excludedKeys": ["req"],
            "maxMessageChars": None,
        }
    )

    assert options.channel_key == "channel"
    assert options.image_url_key == "image"
    assert options.message_key == "message"
    assert options.keep_alive is True
    assert options.excluded_keys == frozenset({"req"})
    assert options.max_message_chars is None


def test_from_mapping_skips_none_for_non_nullable_fields() -> None:
    options = TransportOptions.from_mapping({"webhook_url": URL, "colors": None, "message_key": None})

    assert options.colors == DEFAULT_COLORS
    assert options.message_key == "msg"


def test_from_mapping_rejects_unknown_keys() -> None:
    with pytest.raises(TypeError, match="Unknown transport option"):
        TransportOptions.from_mapping({"webhook_url": URL, "icon": ":robot:"})


def test_from_mapping_requires_webhook_url() -> None:
    with pytest.raises(TypeError, match="webhook_url is required"):
        TransportOptions.from_mapping({"channelKey": "channel"})


def test_replace_returns_new_instance() -> None:
    original = TransportOptions(webhook_url=URL)
    changed = original.replace(channel_key="channel", excluded_keys={"user"})

    assert original.channel_key is None
    assert changed.channel_key == "channel"
    assert changed.excluded_keys == frozenset({"user"})


def test_default_colour_table_is_shared_read_only_proxy() -> None:
    first = TransportOptions(webhook_url=URL)
    second = TransportOptions(webhook_url=URL)

    assert first.colors is DEFAULT_COLORS
    assert second.colors is DEFAULT_COLORS
    assert first == second
