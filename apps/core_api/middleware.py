"""
Custom FastAPI Middleware.

Implements:
- Request ID injection
- One Observation per inbound request (path/method -> name, status/latency -> tags)
"""

import time
import uuid
from fnmatch import fnmatch
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from lookout_core.keyvalue import UNKNOWN
from lookout_core.observation import Observation
from lookout_core.registry import ObservationRegistry
from lookout_obs.logging import get_logger

logger = get_logger(__name__)

HTTP_SERVER_OBSERVATION = "http.server.requests"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Inject unique request ID into each request.

    Adds X-Request-ID header to response.
    Stores request_id in request.state for logging.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Get request ID from header or generate new one
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id

        return response


def outcome_for(status_code: int) -> str:
    """Outcome tag for an HTTP status code."""
    if 100 <= status_code < 200:
        return "INFORMATIONAL"
    if 200 <= status_code < 300:
        return "SUCCESS"
    if 300 <= status_code < 400:
        return "REDIRECTION"
    if 400 <= status_code < 500:
        return "CLIENT_ERROR"
    if 500 <= status_code < 600:
        return "SERVER_ERROR"
    return UNKNOWN


class ObservationMiddleware(BaseHTTPMiddleware):
    """
    Observe every request whose path matches one of `url_patterns`.

    The request's observation is ambient while the route runs, so observed
    service calls become its children. Failures from the app are reported
    through `error()` and re-raised.
    """

    def __init__(self, app, registry: ObservationRegistry, url_patterns: list[str] | None = None):
        super().__init__(app)
        self.registry = registry
        self.url_patterns = url_patterns if url_patterns is not None else ["/*"]

    def matches(self, path: str) -> bool:
        return any(fnmatch(path, pattern) for pattern in self.url_patterns)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not self.matches(path):
            return await call_next(request)

        method = request.method
        observation = Observation.create(
            HTTP_SERVER_OBSERVATION,
            self.registry,
            contextual_name=f"http {method.lower()}",
        )
        observation.low_cardinality_tag("method", method)
        observation.high_cardinality_tag("http.url", path)
        observation.high_cardinality_tag(
            "request_id", getattr(request.state, "request_id", UNKNOWN)
        )
        observation.start()

        try:
            with observation.scope():
                response = await call_next(request)
        except BaseException as e:
            self._tag_response(observation, request, 500, e)
            observation.error(e)
            raise

        self._tag_response(observation, request, response.status_code, None)
        observation.stop()
        return response

    def _tag_response(
        self,
        observation: Observation,
        request: Request,
        status_code: int,
        exc: BaseException | None,
    ) -> None:
        route = request.scope.get("route")
        uri = getattr(route, "path", None) or UNKNOWN
        started_at = observation.context.started_at or time.monotonic()
        duration_ms = round((time.monotonic() - started_at) * 1000, 2)

        observation.low_cardinality_tag("uri", uri)
        observation.low_cardinality_tag("status", status_code)
        observation.low_cardinality_tag("outcome", outcome_for(status_code))
        observation.low_cardinality_tag("exception", type(exc).__name__ if exc else "none")
        observation.high_cardinality_tag("duration_ms", duration_ms)
        if uri != UNKNOWN:
            observation.contextual_name(f"http {request.method.lower()} {uri}")

        logger.debug(
            "http_request_observed",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
