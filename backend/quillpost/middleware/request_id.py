"""
Quillpost Backend — Request ID Middleware
===========================================

What:  Assigns every request a correlation id and echoes it in the response.
How:   Reuses a non-empty inbound X-Request-ID, otherwise generates a UUID4;
       stores it in a fresh RequestContext, the request_id_var ContextVar,
       and the X-Request-ID response header.
Who:   Applied to every request via Starlette middleware.
When:  First stage of the pipeline; every later stage reads the id.
"""

import uuid
from typing import Mapping, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from quillpost.context import RequestContext, request_id_var

REQUEST_ID_HEADER = "x-request-id"


def resolve_request_id(headers: Mapping[str, str]) -> str:
    """
    Pick the correlation id for a request.

    Starlette's Headers are case-insensitive, so "X-Request-ID" matches.
    An empty header value counts as absent.
    """
    incoming: Optional[str] = headers.get(REQUEST_ID_HEADER)
    if incoming:
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that opens the per-request context.

    Behavior:
        1. Choose the id (client-provided or generated)
        2. Create RequestContext on request.state.context
        3. Publish the id through request_id_var for loggers/handlers
        4. Add X-Request-ID to the response, including error responses
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers)

        request.state.context = RequestContext(correlation_id=rid)
        request.state.request_id = rid
        request_id_var.set(rid)

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
