"""Logging and metrics for KubeRestart."""
