"""Typed ASGI definitions.

Raw ASGI aliases plus a frozen view of the HTTP scope fields the
adapter reads. Users never see these.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass
from typing import Any, TypeAlias

# Raw ASGI 3.0 types
Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class HTTPScope:
    """Typed HTTP scope parsed from raw ASGI scope dict."""

    type: str
    method: str
    path: str
    query_string: bytes

    @classmethod
    def from_scope(cls, scope: Scope) -> "HTTPScope":
        """Parse raw ASGI scope into typed object."""
        return cls(
            type=scope["type"],
            method=scope["method"],
            path=scope["path"],
            query_string=scope.get("query_string", b""),
        )
