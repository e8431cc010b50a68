from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

_BOARD_PATH = re.compile(r"^/api/boards/(?P<board_id>[^/]+)")


def board_id_from_path(path: str) -> Optional[str]:
    """Return the board handle addressed by ``path``, if any."""
    m = _BOARD_PATH.match(path)
    return m.group("board_id") if m else None


class RequestIDLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with a request ID and the board it addresses.

    A caller-supplied ``x-request-id`` is kept so one host request can be
    traced across processes. The ID is echoed on the response; server errors
    are logged at warning level.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        context = {
            "request_id": request_id,
            "board_id": board_id_from_path(request.url.path),
            "method": request.method,
            "path": request.url.path,
        }
        logger.info("board request", extra=context)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "board response",
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return response
