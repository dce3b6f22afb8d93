"""Handler parameter binding.

Each handler parameter is resolved from exactly one place: a path
variable, the query string, or the raw request context. The decision is
made once per route at registration time and stored as a ``BindingPlan``,
so dispatch does no signature introspection.
"""

import inspect
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ParamKind(Enum):
    """Where a handler parameter gets its value from."""

    PATH = "path"
    QUERY = "query"
    CONTEXT = "context"


@dataclass(frozen=True, slots=True)
class ParamSource:
    name: str
    kind: ParamKind


@dataclass(frozen=True, slots=True)
class BindingPlan:
    """Resolved parameter sources for one route.

    ``query`` keeps the handler's declaration order, ``path`` keeps the
    order the variables appear in the template, and ``context`` holds
    the names that receive the raw request context.
    """

    query: tuple[ParamSource, ...]
    path: tuple[ParamSource, ...]
    context: tuple[ParamSource, ...]

    @property
    def sources(self) -> tuple[ParamSource, ...]:
        return (*self.query, *self.path, *self.context)


def declared_parameters(handler: Callable[..., Any]) -> tuple[str, ...]:
    """Return the names a handler can receive as keyword arguments.

    ``*args`` / ``**kwargs`` are skipped, as are positional-only
    parameters since binding is done by keyword.
    """
    sig = inspect.signature(handler)
    return tuple(
        name
        for name, param in sig.parameters.items()
        if param.kind in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
    )


def build_plan(
    parameters: Iterable[str],
    variable_names: Iterable[str],
    context_names: Iterable[str] = ("request", "context"),
) -> BindingPlan:
    """Decide the source of every declared parameter.

    Resolution order:
    1. Path variable with the same name (takes precedence over the query)
    2. Reserved context name
    3. Query parameter
    """
    declared = list(dict.fromkeys(parameters))
    variables = list(dict.fromkeys(variable_names))
    reserved = frozenset(context_names)

    path = tuple(ParamSource(name, ParamKind.PATH) for name in variables if name in declared)
    query: list[ParamSource] = []
    context: list[ParamSource] = []
    for name in declared:
        if name in variables:
            continue
        if name in reserved:
            context.append(ParamSource(name, ParamKind.CONTEXT))
        else:
            query.append(ParamSource(name, ParamKind.QUERY))

    return BindingPlan(query=tuple(query), path=path, context=tuple(context))


def bind(
    plan: BindingPlan,
    path_params: Mapping[str, str],
    query: Mapping[str, str],
    context: Any = None,
) -> dict[str, Any]:
    """Build handler keyword arguments from a plan.

    A query parameter missing from the request binds ``None``; it is
    never an error. Keys come out in plan order: query parameters, then
    path variables, then the context.
    """
    kwargs: dict[str, Any] = {}
    for source in plan.query:
        kwargs[source.name] = query.get(source.name)
    for source in plan.path:
        kwargs[source.name] = path_params[source.name]
    for source in plan.context:
        kwargs[source.name] = context
    return kwargs
