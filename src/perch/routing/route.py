"""CompiledRoute and RouteMatch frozen dataclasses, plus the Verb enum."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from perch.errors import ConfigurationError
from perch.routing.binder import BindingPlan
from perch.routing.pattern import CompiledPattern


class Verb(StrEnum):
    """The closed set of HTTP verbs a route can be registered for."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, value: "str | Verb") -> "Verb":
        """Return the Verb for *value*, case-insensitively.

        Raises ``ConfigurationError`` for anything outside the enum.
        """
        if isinstance(value, Verb):
            return value
        try:
            return cls(value.upper())
        except ValueError:
            allowed = ", ".join(cls)
            msg = f"Unsupported HTTP verb {value!r}. Expected one of: {allowed}"
            raise ConfigurationError(msg) from None


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A frozen route definition.

    Created once at registration time and owned by the registry.
    """

    verb: Verb
    pattern: CompiledPattern
    handler: Callable[..., Any]
    parameters: tuple[str, ...]
    plan: BindingPlan
    name: str | None = None

    @property
    def template(self) -> str:
        return self.pattern.template

    @property
    def variable_names(self) -> tuple[str, ...]:
        return self.pattern.variable_names

    def accepts(self, method: str) -> bool:
        """True if *method* (any case) is this route's verb."""
        return method.upper() == self.verb


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: CompiledRoute
    path_params: dict[str, str]
