"""
Thin Logger wrapper used across the Livia service.

Keeps call sites short (keyword arguments become `extra` fields) and adds a
few helpers for request/response style logging.
"""

import logging
import time
import json
from typing import Any
from contextlib import contextmanager
from .config import setup_logging


class Logger:
    """Process-wide logger with request-scoped helpers."""

    def __init__(self):
        self._logger = setup_logging()

    def is_debug_enabled(self) -> bool:
        return self._logger.isEnabledFor(logging.DEBUG)

    def info(self, message: str, **kwargs):
        self._logger.info(message, extra=kwargs or None)

    def debug(self, message: str, **kwargs):
        self._logger.debug(message, extra=kwargs or None)

    def warning(self, message: str, **kwargs):
        self._logger.warning(message, extra=kwargs or None)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log an error message. Pass exc_info=True from inside an except block."""
        self._logger.error(message, extra=kwargs or None, exc_info=exc_info)

    def request(self, operation: str, request_id: str, **kwargs):
        """Log the start of an outgoing or incoming request."""
        message_parts = [f"Request: {operation}"]
        if 'model' in kwargs:
            message_parts.append(f"model={kwargs['model']}")
        if 'exchange_id' in kwargs:
            message_parts.append(f"exchange={kwargs['exchange_id']}")

        self.info(" | ".join(message_parts), request_id=request_id, **kwargs)

    def response(self, operation: str, request_id: str, status_code: int = 200, **kwargs):
        """Log a completed request with its status."""
        message_parts = [f"Response: {operation}", f"status={status_code}"]
        if 'processing_time_ms' in kwargs:
            message_parts.append(f"time={kwargs['processing_time_ms']}ms")

        self.info(" | ".join(message_parts), request_id=request_id, **kwargs)

    def debug_data(self, title: str, data: Any, request_id: str, **kwargs):
        """Log full payloads, only when LOG_LEVEL=DEBUG."""
        if not self.is_debug_enabled():
            return

        if isinstance(data, (dict, list)):
            data_str = json.dumps(data, indent=2, ensure_ascii=False)
        else:
            data_str = str(data)

        message = f"DEBUG: {title}"
        if 'component' in kwargs:
            message += f" | component={kwargs['component']}"
        if 'data_flow' in kwargs:
            message += f" | flow={kwargs['data_flow']}"

        self.debug(f"{message}\n{data_str}", request_id=request_id, **kwargs)

    def performance(self, operation: str, start_time: float, request_id: str, **kwargs):
        duration_ms = int((time.time() - start_time) * 1000)
        self.info(
            f"Performance: {operation} | duration={duration_ms}ms",
            request_id=request_id,
            duration_ms=duration_ms,
            **kwargs
        )

    @contextmanager
    def request_context(self, operation: str, request_id: str, **kwargs):
        """
        Context manager for request-scoped logging.

        Logs the start, any escaping exception and the completion time.
        """
        start_time = time.time()
        self.request(operation=operation, request_id=request_id, **kwargs)

        try:
            yield
        except Exception as e:
            self.error(f"{operation} failed: {e}", request_id=request_id, **kwargs)
            raise
        finally:
            duration_ms = int((time.time() - start_time) * 1000)
            self.info(
                f"Completed: {operation} | duration={duration_ms}ms",
                request_id=request_id,
                **kwargs
            )
