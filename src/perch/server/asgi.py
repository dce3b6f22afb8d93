"""ASGI handler — translates ASGI scope/messages to perch types.

The only component that touches raw ASGI directly. Converts the scope
to a RequestDescriptor, runs the synchronous dispatcher on a worker
thread, and sends the collected Response back through ASGI send().
"""

import logging
import traceback
from functools import partial

import anyio.to_thread

from perch._internal.asgi import Receive, Scope, Send
from perch.dispatch import Dispatcher
from perch.errors import HTTPError, NotFound
from perch.http.request import RequestDescriptor
from perch.http.response import Response
from perch.server.negotiation import ResponseSink
from perch.server.sender import send_response

logger = logging.getLogger("perch.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Dispatcher,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the dispatcher."""
    if scope["type"] != "http":
        return

    request = RequestDescriptor.from_asgi(scope)
    sink = ResponseSink()

    try:
        handled = await anyio.to_thread.run_sync(
            partial(dispatcher.dispatch, request, context=request, sink=sink)
        )
        if not handled:
            raise NotFound(f"No route matches {request.method} {request.path!r}")
        response = sink.response or Response(status=204)
    except HTTPError as exc:
        response = Response(body=exc.detail or str(exc.status), status=exc.status)
    except Exception:
        logger.exception("Unhandled error dispatching %s %s", request.method, request.path)
        body = traceback.format_exc() if debug else "Internal Server Error"
        response = Response(body=body, status=500)

    await send_response(response, send)
