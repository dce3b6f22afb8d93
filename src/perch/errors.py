"""Perch exception hierarchy.

Shared across the pattern compiler, registry, dispatcher, and ASGI glue
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when a registration or app configuration is invalid.

    Typically surfaces during ``App.freeze()`` at startup.
    """


class InvalidPatternError(ConfigurationError):
    """A path template could not be translated into a valid matcher.

    Attributes:
        template: The route template as written by the user.
        source: The generated regular expression source that failed.
    """

    def __init__(self, template: str, source: str, reason: str = "") -> None:
        self.template = template
        self.source = source
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid route template {template!r} (compiled to {source!r}){detail}")


class RegistryFrozenError(PerchError):
    """Raised when a route is registered after the registry was finalized."""


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Only the ASGI adapter turns these into responses; the dispatcher
    itself never raises them.
    """

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no registered route handled the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
