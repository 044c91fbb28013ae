import time
import os
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from ..core.logging import logger


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        request_id = os.urandom(8).hex()
        request.state.request_id = request_id

        logger.request(
            operation="Incoming Request",
            request_id=request_id,
            method=request.method,
            url=str(request.url)
        )

        # DEBUG логирование тела запроса
        if request.method in ["POST", "PUT", "PATCH"] and logger.is_debug_enabled():
            body = await request.body()
            logger.debug_data(
                title="Request Body",
                data=body.decode("utf-8", errors="replace"),
                request_id=request_id,
                component="middleware",
                data_flow="incoming"
            )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Unexpected error: {e}",
                exc_info=True,
                request_id=request_id,
                status_code=500
            )
            raise

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Request-ID"] = request_id

        logger.response(
            operation="Outgoing Response",
            request_id=request_id,
            status_code=response.status_code,
            processing_time_ms=round(process_time * 1000)
        )

        return response
