"""
Request observability.

Every response carries `X-Correlation-ID` (taken from the request when the
caller sent one) and `X-Process-Time` in milliseconds. One access log line is
written per request on the `pixledger.http` logger, tagged with the
correlation id and, once authentication ran, the calling account id, so a
transfer can be traced from the access log to the ledger and audit rows.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("pixledger.http")

CORRELATION_HEADER = "X-Correlation-ID"


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class ObservabilityMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
        request.state.correlation_id = correlation_id
        request.state.account_id = None

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = str(elapsed_ms)

        account_id = getattr(request.state, "account_id", None)
        logger.log(
            _level_for(response.status_code),
            "%s %s -> %s in %sms [cid=%s account=%s]",
            request.method, request.url.path, response.status_code, elapsed_ms,
            correlation_id, account_id if account_id is not None else "-",
            extra={
                "correlation_id": correlation_id,
                "account_id": account_id,
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        return response
