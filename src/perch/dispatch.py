"""Request dispatch against a frozen route registry.

The dispatcher walks routes in registration order. For every route
whose verb and template match the request it binds the handler's
arguments, calls the handler, and passes the result to the
result-processing collaborator. Under ``MatchPolicy.ALL`` the walk does
not stop at the first match: every matching route fires, in order.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

from perch.config import MatchPolicy
from perch.errors import ConfigurationError
from perch.http.request import RequestDescriptor
from perch.routing.binder import bind
from perch.routing.registry import RouteRegistry
from perch.routing.route import CompiledRoute, RouteMatch
from perch.server.negotiation import process_result as negotiate_into_sink

logger = logging.getLogger("perch.dispatch")

ProcessResult: TypeAlias = Callable[[Any, Any], None]

# Default for ``context``; None is a valid context value.
NO_CONTEXT: Any = object()


class Dispatcher:
    """Matches requests against a registry and invokes handlers.

    Usage::

        dispatcher = Dispatcher(registry)
        sink = ResponseSink()
        handled = dispatcher.handle("GET", "/books/42", {"page": "2"}, sink=sink)

    Thread safety:
        The dispatcher holds the registry's frozen route tuple and no
        other state, so ``dispatch`` may run concurrently on any number
        of threads. Handlers and the result processor are responsible
        for their own shared state.
    """

    __slots__ = ("_policy", "_process_result", "_routes")

    def __init__(
        self,
        registry: RouteRegistry,
        process_result: ProcessResult = negotiate_into_sink,
        *,
        policy: MatchPolicy = MatchPolicy.ALL,
    ) -> None:
        if not registry.frozen:
            msg = "Call registry.finalize() before building a Dispatcher."
            raise ConfigurationError(msg)
        self._routes: tuple[CompiledRoute, ...] = registry.routes
        self._process_result = process_result
        self._policy = MatchPolicy(policy)

    @property
    def policy(self) -> MatchPolicy:
        return self._policy

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        return self._routes

    def match_all(self, method: str, path: str) -> list[RouteMatch]:
        """Return every match the request would fire, without invoking anything.

        Honours the match policy, so under ``FIRST`` the list holds at
        most one entry.
        """
        matches: list[RouteMatch] = []
        for route in self._routes:
            if not route.accepts(method):
                continue
            path_params = route.pattern.match(path)
            if path_params is None:
                continue
            matches.append(RouteMatch(route=route, path_params=path_params))
            if self._policy is MatchPolicy.FIRST:
                break
        return matches

    def dispatch(
        self,
        request: RequestDescriptor,
        *,
        context: Any = NO_CONTEXT,
        sink: Any = None,
    ) -> bool:
        """Dispatch *request* and report whether any route handled it.

        *context* is handed to handler parameters with a reserved context
        name; it defaults to *request* itself. An explicit ``None`` is
        passed through as-is. *sink* is passed through
        untouched to the result processor.

        Exceptions from handlers or the result processor propagate.
        """
        if context is NO_CONTEXT:
            context = request

        handled = False
        for match in self.match_all(request.method, request.path):
            route = match.route
            kwargs = bind(route.plan, match.path_params, request.query, context)
            logger.debug(
                "%s %s -> %s",
                request.method,
                request.path,
                getattr(route.handler, "__qualname__", route.template),
            )
            result = route.handler(**kwargs)
            self._process_result(result, sink)
            handled = True

        if not handled:
            logger.debug("No route matched %s %s", request.method, request.path)
        return handled

    def handle(
        self,
        method: str,
        path: str,
        query_params: Mapping[str, str] | None = None,
        context: Any = NO_CONTEXT,
        sink: Any = None,
    ) -> bool:
        """Transport-facing form of ``dispatch`` taking plain values."""
        request = RequestDescriptor.build(method, path, query_params)
        return self.dispatch(request, context=context, sink=sink)
