"""Transport glue — result negotiation, ASGI adapter, pounce launchers."""
