"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kuberestart.models.config import (
    ClusterConfig,
    EventConfig,
    KubeRestartConfig,
    LogConfig,
    StatusConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBERESTART_{key}", default)


def _env_int(key: str, default: int) -> int:
    raw = _env(key, str(default))
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"KUBERESTART_{key} must be an integer, got {raw!r}") from exc


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    valid = {"json", "console"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log format: {value}. Must be one of {valid}")
    return value.lower()


def _validate_event_reason(value: str) -> str:
    if not value or any(ch.isspace() for ch in value):
        raise ValueError(f"Invalid event reason: {value!r}. Must be a non-empty single word")
    return value


def _validate_status_port(value: int) -> int:
    if value != 0 and not 1024 <= value <= 65535:
        raise ValueError(f"Invalid status port: {value}. Must be 0 (disabled) or 1024-65535")
    return value


def load_config(overrides: dict[str, object] | None = None) -> KubeRestartConfig:
    """Load configuration from KUBERESTART_* environment variables.

    *overrides* maps option names (``master``, ``kubeconfig``, ``event_reason``,
    ``log_level``, ``log_format``, ``status_port``) to values that take
    precedence over the environment; ``None`` values are ignored.
    """
    opts = {k: v for k, v in (overrides or {}).items() if v is not None}

    def pick(name: str, default: str) -> str:
        if name in opts:
            return str(opts[name])
        return _env(name.upper(), default)

    if "status_port" in opts:
        status_port = int(opts["status_port"])  # type: ignore[call-overload]
    else:
        status_port = _env_int("STATUS_PORT", 8080)

    return KubeRestartConfig(
        cluster=ClusterConfig(
            master=pick("master", ""),
            kubeconfig=pick("kubeconfig", ""),
        ),
        event=EventConfig(
            reason=_validate_event_reason(pick("event_reason", "ContainerRestart")),
        ),
        status=StatusConfig(
            port=_validate_status_port(status_port),
        ),
        log=LogConfig(
            level=_validate_log_level(pick("log_level", "info")),
            format=_validate_log_format(pick("log_format", "json")),
        ),
    )
