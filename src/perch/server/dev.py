"""Development server.

Starts a single-worker pounce server with the live perch App object.
"""


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = True,
    log_level: str = "info",
    app_path: str | None = None,
) -> None:
    """Start a pounce dev server with the given perch App.

    The live ``App`` is served directly through ``pounce.server.Server``.
    When *app_path* is given, pounce re-imports it on each reload cycle,
    so route and handler edits on disk are picked up; otherwise a reload
    keeps serving the *app* object it was started with.

    Args:
        app: ASGI callable (perch App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Enable auto-reload on file changes (default True).
        log_level: Server log level (``"debug"``, ``"info"``, ...).
        app_path: Optional ``"module:attribute"`` import string.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        log_level=log_level,
    )
    server = Server(config, app, app_path=app_path)
    server.run()
