"""Content negotiation — maps handler return values to Response objects.

``process_result`` is the default result-processing collaborator the
dispatcher hands every handler result to. It negotiates the value and
stores the Response in the per-request ``ResponseSink``.
"""

import json as json_module
from dataclasses import dataclass, field
from typing import Any

from perch.errors import ConfigurationError
from perch.http.response import Response


@dataclass(slots=True)
class ResponseSink:
    """Per-request holder the transport reads the final response from.

    When several routes fire for one request, each processed result
    overwrites ``response``; ``results`` keeps all of them in order.
    """

    response: Response | None = None
    results: list[Any] = field(default_factory=list)


def negotiate(value: Any) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``None``             -> 204, empty body
    3. ``str``              -> 200, text/plain
    4. ``bytes``            -> 200, application/octet-stream
    5. ``dict`` / ``list``  -> 200, application/json
    6. ``(value, int)``     -> negotiate value, override status
    """
    match value:
        case Response():
            return value
        case None:
            return Response(status=204)
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json",
            )
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return a Response, str, bytes, dict, list, None, or (value, status)."
            )
            raise ConfigurationError(msg)


def process_result(result: Any, sink: ResponseSink | None) -> None:
    """Negotiate *result* and store it in *sink*.

    A ``None`` sink means the transport does not collect responses; the
    result is still negotiated so conversion errors surface.
    """
    response = negotiate(result)
    if sink is None:
        return
    sink.results.append(result)
    sink.response = response
