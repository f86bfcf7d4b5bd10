"""Use cases turning log records into delivered Slack messages."""

from __future__ import annotations

from .build_payload import build_payload
from .forward_record import ForwardRecord, create_forward_record

__all__ = ["ForwardRecord", "build_payload", "create_forward_record"]
