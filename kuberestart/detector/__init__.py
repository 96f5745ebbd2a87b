"""Restart detection for KubeRestart."""

from kuberestart.detector.restarts import detect_restarts, diff_containers

__all__ = ["detect_restarts", "diff_containers"]
