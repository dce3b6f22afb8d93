"""Perch application class.

Mutable during setup (route declarations). Frozen when ``freeze()`` is
called explicitly or on the first dispatch / ASGI call, at which point
declarations are registered in source order and the registry is
finalized.
"""

import inspect
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch.config import AppConfig
from perch.dispatch import NO_CONTEXT, Dispatcher, ProcessResult
from perch.errors import ConfigurationError, RegistryFrozenError
from perch.http.request import RequestDescriptor
from perch.routing.registry import RouteRegistry
from perch.routing.route import Verb
from perch.server.asgi import handle_request
from perch.server.negotiation import process_result as negotiate_into_sink

Handler = Callable[..., Any]


@dataclass(slots=True)
class _PendingRoute:
    """A route declaration waiting to be registered."""

    verb: Verb
    path: str
    handler: Handler
    params: tuple[str, ...] | None
    name: str | None


class App:
    """The perch application.

    Usage::

        app = App()

        @app.get("/books/:id")
        def show_book(id, fmt):
            return {"id": id, "format": fmt}

        app.handle("GET", "/books/42", {"fmt": "json"})

    Thread safety:
        Declarations happen single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread builds the registry even when several ASGI workers call
        ``__call__()`` on their first request. After that, dispatch only
        reads frozen state.
    """

    __slots__ = (
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_pending_routes",
        "_process_result",
        "_registry",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        process_result: ProcessResult | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._process_result: ProcessResult = process_result or negotiate_into_sink
        self._pending_routes: list[_PendingRoute] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Set by _freeze()
        self._registry: RouteRegistry | None = None
        self._dispatcher: Dispatcher | None = None

    # -- Route declaration --

    def route(
        self,
        path: str,
        *,
        verb: str | Verb = Verb.GET,
        params: Iterable[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Declare a route handler via decorator.

        Args:
            path: Route template. Use ``:name`` for path variables.
            verb: HTTP verb. Defaults to ``GET``.
            params: The handler's parameter names in declaration order.
                Defaults to the names in the handler's signature.
            name: Optional route name for introspection.
        """
        route_verb = Verb.parse(verb)
        declared = tuple(params) if params is not None else None

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            if not path.startswith("/"):
                msg = f"Route template {path!r} must start with '/'."
                raise ConfigurationError(msg)
            if inspect.iscoroutinefunction(func):
                msg = (
                    f"{func.__qualname__} is a coroutine function. "
                    "Perch calls handlers synchronously; declare it with plain 'def'."
                )
                raise ConfigurationError(msg)
            self._pending_routes.append(_PendingRoute(route_verb, path, func, declared, name))
            return func

        return decorator

    def get(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, verb=Verb.GET, **kwargs)

    def head(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, verb=Verb.HEAD, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, verb=Verb.POST, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, verb=Verb.PUT, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, verb=Verb.PATCH, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, verb=Verb.DELETE, **kwargs)

    def options(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, verb=Verb.OPTIONS, **kwargs)

    # -- Frozen state --

    @property
    def registry(self) -> RouteRegistry:
        """The finalized route registry. Freezes the app if needed."""
        self._ensure_frozen()
        assert self._registry is not None
        return self._registry

    @property
    def dispatcher(self) -> Dispatcher:
        """The dispatcher over the finalized registry. Freezes the app if needed."""
        self._ensure_frozen()
        assert self._dispatcher is not None
        return self._dispatcher

    def freeze(self) -> None:
        """Register every declared route, in order, and finalize."""
        self._ensure_frozen()

    # -- Dispatch entry points --

    def dispatch(
        self,
        request: RequestDescriptor,
        *,
        context: Any = NO_CONTEXT,
        sink: Any = None,
    ) -> bool:
        """Dispatch an already-parsed request. See ``Dispatcher.dispatch``."""
        return self.dispatcher.dispatch(request, context=context, sink=sink)

    def handle(
        self,
        method: str,
        path: str,
        query_params: Mapping[str, str] | None = None,
        context: Any = NO_CONTEXT,
        sink: Any = None,
    ) -> bool:
        """Dispatch from plain transport values. See ``Dispatcher.handle``."""
        return self.dispatcher.handle(method, path, query_params, context, sink)

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        app_path: str | None = None,
    ) -> None:
        """Start the server (dev or production based on config.debug).

        Freezes the app, then serves it with pounce: a single reloading
        worker in debug mode, ``config.workers`` workers otherwise.

        Args:
            host: Bind host; defaults to ``config.host``.
            port: Bind port; defaults to ``config.port``.
            app_path: ``"module:attribute"`` import string. In debug mode
                pounce re-imports it on every reload so code edits take
                effect; without it reload restarts the same in-memory app.
        """
        self._ensure_frozen()

        _host = host or self.config.host
        _port = port or self.config.port

        if self.config.debug:
            from perch.server.dev import run_dev_server

            run_dev_server(
                self,
                _host,
                _port,
                reload=self.config.reload,
                log_level=self.config.log_level,
                app_path=app_path,
            )
        else:
            from perch.server.production import run_production_server

            run_production_server(
                self,
                _host,
                _port,
                workers=self.config.workers,
                log_level=self.config.log_level,
            )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes
        to the request handler.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(
            scope,
            receive,
            send,
            dispatcher=self.dispatcher,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Freeze at startup so registration errors stop the server early."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile declarations into the registry and dispatcher.

        MUST only be called while holding _freeze_lock.
        """
        registry = RouteRegistry(
            strict_literals=self.config.strict_literals,
            context_names=self.config.context_names,
        )
        for pending in self._pending_routes:
            registry.register(
                pending.verb,
                pending.path,
                pending.params,
                pending.handler,
                name=pending.name,
            )
        registry.finalize()

        self._registry = registry
        self._dispatcher = Dispatcher(
            registry,
            self._process_result,
            policy=self.config.match_policy,
        )
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot declare routes after the app has been frozen. "
                "Declare every route before the first request is dispatched."
            )
            raise RegistryFrozenError(msg)
