"""
Request Context Middleware

Runs on every request, before routing:
- assigns a correlation id (reusing an inbound X-Correlation-ID when the
  caller sends one) and stores it on request.state
- times the request

On the way out it stamps X-Correlation-ID and X-Process-Time on the
response, plus X-Tenant-ID when the request was resolved to a tenant.

Tenant resolution itself happens in the route dependencies
(api/deps.py), which write request.state.tenant_id for us to echo.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
import logging
import re
import time
import uuid

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
TENANT_HEADER = "X-Tenant-ID"

# Inbound ids are echoed into logs and headers; keep them boring
_VALID_CORRELATION_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_correlation_id() -> str:
    return f"req_{uuid.uuid4().hex}"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Correlation id, timing and tenant headers for every response."""

    async def dispatch(self, request: Request, call_next):
        inbound = request.headers.get(CORRELATION_HEADER, "")
        correlation_id = inbound if _VALID_CORRELATION_ID.match(inbound) else new_correlation_id()
        request.state.correlation_id = correlation_id

        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        tenant_id = getattr(request.state, "tenant_id", None)
        if tenant_id:
            response.headers[TENANT_HEADER] = tenant_id

        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} in {process_time:.4f}s",
            extra={
                "correlation_id": correlation_id,
                "tenant_id": tenant_id,
                "path": request.url.path,
                "method": request.method,
            }
        )
        return response
