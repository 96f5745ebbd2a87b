"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ClusterConfig:
    """Control-plane endpoint and credentials."""

    master: str = ""
    kubeconfig: str = ""


@dataclass
class EventConfig:
    """Emitted event configuration."""

    reason: str = "ContainerRestart"
    component: str = "kube-restart-monitor"


@dataclass
class StatusConfig:
    """Health/status HTTP endpoint configuration."""

    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class KubeRestartConfig:
    """Top-level KubeRestart configuration."""

    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    event: EventConfig = field(default_factory=EventConfig)
    status: StatusConfig = field(default_factory=StatusConfig)
    log: LogConfig = field(default_factory=LogConfig)
