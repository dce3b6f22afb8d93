"""Immutable request descriptor.

The transport parses the HTTP request; the dispatcher only needs the
method, the path, and the query parameters.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import unquote

from perch._internal.asgi import HTTPScope, Scope
from perch.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """An already-parsed inbound request.

    ``method`` is kept as received; the dispatcher compares it against
    route verbs case-insensitively.
    """

    method: str
    path: str
    query: QueryParams = field(default_factory=QueryParams)

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        query: Mapping[str, str] | None = None,
    ) -> "RequestDescriptor":
        """Build from plain values, wrapping *query* in ``QueryParams``."""
        return cls(method=method, path=path, query=QueryParams.from_mapping(query or {}))

    @classmethod
    def from_target(cls, method: str, target: str) -> "RequestDescriptor":
        """Build from a request target such as ``/books?page=2``."""
        path, _, query_string = target.partition("?")
        return cls(method=method, path=unquote(path), query=QueryParams(query_string))

    @classmethod
    def from_asgi(cls, scope: Scope) -> "RequestDescriptor":
        """Build from an ASGI HTTP scope (path already percent-decoded)."""
        http = HTTPScope.from_scope(scope)
        return cls(method=http.method, path=http.path, query=QueryParams(http.query_string))
