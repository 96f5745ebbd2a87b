"""KubeRestart: container restart monitor for Kubernetes clusters."""

__version__ = "0.1.0"
