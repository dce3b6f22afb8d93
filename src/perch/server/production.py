"""Production server.

Starts a multi-worker pounce server with the live perch App object.
The frozen route registry is shared read-only by every worker.
"""


def run_production_server(
    app: object,
    host: str,
    port: int,
    *,
    workers: int = 0,
    log_level: str = "info",
) -> None:
    """Run a perch app under pounce without reload.

    Args:
        app: ASGI callable (perch App instance).
        host: Bind host address.
        port: Bind port number.
        workers: Worker count (0 = auto-detect from CPU count).
        log_level: Server log level.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        log_level=log_level,
    )
    server = Server(config, app)
    server.run()
