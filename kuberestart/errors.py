"""Exception hierarchy for KubeRestart."""

from __future__ import annotations


class KubeRestartError(Exception):
    """Base class for all KubeRestart errors."""


class CursorExpiredError(KubeRestartError):
    """The watch resource version is too old for the server to resume from.

    Recoverable: the watch coordinator discards the cursor and re-lists.
    """


class ClusterAPIError(KubeRestartError):
    """A list or watch call failed for any reason other than cursor expiry."""

    def __init__(self, status: int, reason: str) -> None:
        super().__init__(f"cluster API error {status}: {reason}")
        self.status = status
        self.reason = reason


class WatchFailedError(KubeRestartError):
    """Raised by the consumer loop when the producer reports a fatal error."""

    def __init__(self, cause: BaseException | None) -> None:
        super().__init__(f"pod watch failed: {cause}")
        self.cause = cause


class ObjectReferenceError(KubeRestartError):
    """An involved-object reference could not be built for a pod."""
