"""Ordered route registry.

Routes are registered during setup, in declaration order, and frozen
into an immutable tuple by ``finalize()``. Declaration order matters:
the dispatcher walks routes in exactly this order, and several routes
with overlapping templates are all kept.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from perch.errors import RegistryFrozenError
from perch.routing.binder import build_plan, declared_parameters
from perch.routing.pattern import compile_template
from perch.routing.route import CompiledRoute, Verb

logger = logging.getLogger("perch.routing")


class RouteRegistry:
    """Append-only route table that becomes read-only once finalized.

    Usage::

        registry = RouteRegistry()
        registry.register("GET", "/books/:id", ["id"], show_book)
        registry.finalize()
        for route in registry:
            ...

    Thread safety:
        Registration is expected to happen on a single thread during
        startup. After ``finalize()`` the routes live in a tuple, so any
        number of dispatching threads can read them without locks.
    """

    __slots__ = ("_context_names", "_frozen", "_pending", "_routes", "_strict_literals")

    def __init__(
        self,
        *,
        strict_literals: bool = True,
        context_names: Iterable[str] = ("request", "context"),
    ) -> None:
        self._strict_literals = strict_literals
        self._context_names = tuple(context_names)
        self._pending: list[CompiledRoute] = []
        self._routes: tuple[CompiledRoute, ...] = ()
        self._frozen = False

    def register(
        self,
        verb: str | Verb,
        template: str,
        parameter_names: Iterable[str] | None,
        handler: Callable[..., Any],
        *,
        name: str | None = None,
    ) -> CompiledRoute:
        """Compile *template* and append a route for *handler*.

        Args:
            verb: HTTP verb, as a ``Verb`` or a case-insensitive string.
            template: Path template, e.g. ``"/books/:id"``.
            parameter_names: The handler's parameter names in declaration
                order. ``None`` reads them from the handler's signature.
            handler: The callable invoked on a match.
            name: Optional route name, used for introspection only.

        Raises ``RegistryFrozenError`` after ``finalize()``,
        ``InvalidPatternError`` for an uncompilable template and
        ``ConfigurationError`` for an unknown verb.
        """
        if self._frozen:
            msg = (
                f"Cannot register {verb} {template!r}: the route registry is finalized. "
                "Register every route before the first request is dispatched."
            )
            raise RegistryFrozenError(msg)

        route_verb = Verb.parse(verb)
        pattern = compile_template(template, strict_literals=self._strict_literals)
        if parameter_names is None:
            parameters = declared_parameters(handler)
        else:
            parameters = tuple(parameter_names)

        unbound = [v for v in pattern.variable_names if v not in parameters]
        if unbound:
            logger.warning(
                "Route %s %r captures %s but %s does not declare it",
                route_verb,
                template,
                ", ".join(unbound),
                getattr(handler, "__qualname__", repr(handler)),
            )

        route = CompiledRoute(
            verb=route_verb,
            pattern=pattern,
            handler=handler,
            parameters=parameters,
            plan=build_plan(parameters, pattern.variable_names, self._context_names),
            name=name,
        )
        self._pending.append(route)
        logger.debug("Registered %s %s -> %s", route_verb, template, pattern.source)
        return route

    def finalize(self) -> None:
        """Freeze the registry. No more routes can be registered."""
        if self._frozen:
            return
        self._routes = tuple(self._pending)
        self._pending = []
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        """All routes in registration order.

        Before ``finalize()`` this is a snapshot of the routes so far.
        """
        if self._frozen:
            return self._routes
        return tuple(self._pending)

    def __iter__(self) -> Iterator[CompiledRoute]:
        return iter(self.routes)

    def __len__(self) -> int:
        return len(self.routes)
