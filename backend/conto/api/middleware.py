"""Request ID Middleware — one correlation id per HTTP request.

Invariants:
    - X-Request-ID from the client is reused; otherwise a uuid4 is generated
    - The id is bound for the whole request, so routes, bus handlers and logs see it
    - Every response carries the id back in X-Request-ID
"""

import logging
from uuid import uuid4

from fastapi import Request

from conto.infrastructure.observability import bind_correlation_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
    with bind_correlation_id(request_id):
        logger.info(
            "HTTP %s %s", request.method, request.url.path,
            extra={"path": request.url.path},
        )
        response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response
