"""X-Request-ID middleware for request correlation and tracing.

This middleware:
- Takes the caller's X-Request-ID when it is well formed, otherwise mints one
- Attaches the ID to request state and to the logging context
- Echoes the ID in response headers
- Logs one access entry per request, tagged with the viewer once auth has run

Middleware Ordering:
- Must be added LAST to run FIRST (FastAPI middleware runs in reverse order)
- Auth failures therefore still carry X-Request-ID
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from tunebase.logging import (
    clear_request_context,
    get_logger,
    set_request_context,
    set_route_template,
)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

# Alphanumeric plus dot, hyphen, underscore; UUIDs also match
VALID_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

logger = get_logger(__name__)


def resolve_request_id(incoming: str | None) -> str:
    """Return the request ID to use for a request.

    A well-formed incoming ID is kept (UUIDs are lowercased to their
    canonical form); anything else is replaced by a fresh UUID4.
    """
    if incoming and len(incoming.encode("utf-8")) <= MAX_REQUEST_ID_LENGTH:
        if VALID_REQUEST_ID_PATTERN.match(incoming):
            try:
                return str(uuid.UUID(incoming)) if len(incoming) == 36 else incoming
            except ValueError:
                return incoming
    return str(uuid.uuid4())


def _route_template(request: Request) -> str | None:
    route = request.scope.get("route")
    return getattr(route, "path", None)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware for X-Request-ID handling and access logging.

    Args:
        app: The ASGI application.
        log_requests: If True, log access entries for each request.
    """

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.monotonic()

        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(request_id, path=request.url.path, method=request.method)

        try:
            response = await call_next(request)

            viewer = getattr(request.state, "viewer", None)
            if viewer is not None:
                set_request_context(request_id, user_id=str(viewer.user_id))
            set_route_template(_route_template(request))

            response.headers[REQUEST_ID_HEADER] = request_id

            if self.log_requests:
                duration_ms = (time.monotonic() - start_time) * 1000
                logger.info(
                    "request_completed",
                    status_code=response.status_code,
                    role=getattr(viewer, "role", None),
                    duration_ms=round(duration_ms, 2),
                )

            return response

        except Exception:
            # unhandled_exception_handler turns this into a 500
            logger.exception("request_failed")
            raise

        finally:
            clear_request_context()

