"""Perch — ordered HTTP route dispatch for plain Python handlers.

Handlers are declared with a verb and a path template (``:name`` marks a
path variable). At startup the declarations are compiled, in order, into
a frozen registry; each request is matched against it, parameters are
bound from the path and query string, and every matching handler's
result is handed to a result processor.

Basic usage::

    from perch import App

    app = App()

    @app.get("/books/:id")
    def show_book(id, fmt):
        return {"id": id, "format": fmt}

    app.run()

Lower-level building blocks::

    from perch import Dispatcher, RouteRegistry

    registry = RouteRegistry()
    registry.register("GET", "/books/:id", ["id"], show_book)
    registry.finalize()
    Dispatcher(registry).handle("GET", "/books/42")
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "CompiledPattern",
    "CompiledRoute",
    "ConfigurationError",
    "Dispatcher",
    "HTTPError",
    "InvalidPatternError",
    "MatchPolicy",
    "NotFound",
    "PerchError",
    "RegistryFrozenError",
    "RequestDescriptor",
    "Response",
    "ResponseSink",
    "RouteRegistry",
    "Verb",
    "compile_template",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name in ("AppConfig", "MatchPolicy"):
        from perch import config as _config

        return getattr(_config, name)

    if name == "Dispatcher":
        from perch.dispatch import Dispatcher

        return Dispatcher

    if name in ("CompiledPattern", "compile_template"):
        from perch.routing import pattern as _pattern

        return getattr(_pattern, name)

    if name in ("CompiledRoute", "Verb"):
        from perch.routing import route as _route

        return getattr(_route, name)

    if name == "RouteRegistry":
        from perch.routing.registry import RouteRegistry

        return RouteRegistry

    if name == "RequestDescriptor":
        from perch.http.request import RequestDescriptor

        return RequestDescriptor

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name == "ResponseSink":
        from perch.server.negotiation import ResponseSink

        return ResponseSink

    if name in (
        "ConfigurationError",
        "HTTPError",
        "InvalidPatternError",
        "NotFound",
        "PerchError",
        "RegistryFrozenError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
