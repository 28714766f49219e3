"""Burrow exception hierarchy.

Shared across the pipeline, dispatchers, the live channel, and the
bootstrap so every module raises and catches the same types.
"""

from dataclasses import dataclass


class BurrowError(Exception):
    """Base for all burrow-specific errors."""


class ConfigurationError(BurrowError):
    """Raised when server configuration is invalid.

    Typically raised while the session is constructed, e.g. when
    ``secure=True`` and the certificate files cannot be found.
    """


class LifecycleError(BurrowError):
    """Raised when an operation is not allowed in the session's current state."""


class PipelineAlreadyPrepared(LifecycleError):  # noqa: N818
    """The pipeline was already assembled.

    Raised by a second ``prepare()`` and by ``use()`` / ``serve()`` once
    the stage order is fixed.
    """


class ChannelNotReady(LifecycleError):  # noqa: N818
    """``eval`` / ``livereload`` was called while no live channel exists.

    The channel only exists between a successful listen and shutdown.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(BurrowError):
    """An error that maps directly to an HTTP status code.

    Raised by pipeline stages. The ASGI handler catches these and turns
    them into a response with the same status.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: nothing in the pipeline produced a response."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
