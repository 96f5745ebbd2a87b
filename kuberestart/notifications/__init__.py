"""Event emission for KubeRestart.

Exports:
    EventEmitter     -- Submits a Warning event per detected restart; never
                        raises and never retries.
    build_event_body -- CoreV1Event-shaped dict for a RestartRecord.
    format_message   -- Human-readable restart message.
"""

from kuberestart.notifications.emitter import (
    DEFAULT_COMPONENT,
    DEFAULT_REASON,
    EventEmitter,
    build_event_body,
    event_name,
    format_message,
)

__all__ = [
    "DEFAULT_COMPONENT",
    "DEFAULT_REASON",
    "EventEmitter",
    "build_event_body",
    "event_name",
    "format_message",
]
