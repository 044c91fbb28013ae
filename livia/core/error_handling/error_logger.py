"""
Error Logging Utility

Centralized error logging so every failure is logged once, with the same
structured fields.
"""

from typing import Dict, Any, Optional

from .error_types import ErrorType, ErrorContext
from ..logging import logger


class ErrorLogger:
    """Единый логгер ошибок, использующий общую систему."""

    @staticmethod
    def log_error(
        error_type: ErrorType,
        message: str,
        context: ErrorContext,
        original_exception: Optional[Exception] = None,
        additional_data: Optional[Dict[str, Any]] = None
    ):
        log_extra = context.to_log_extra()
        log_extra["error_code"] = error_type.code
        log_extra["http_status_code"] = error_type.status_code

        if additional_data:
            log_extra.update(additional_data)

        if original_exception is not None:
            log_extra["original_exception"] = str(original_exception)
            log_extra["original_exception_type"] = type(original_exception).__name__

        logger.error(message, **log_extra)

    @staticmethod
    def log_remote_error(
        endpoint: str,
        status_code: int,
        error_details: str,
        context: ErrorContext
    ):
        """Log a non-2xx answer from a remote endpoint together with its body."""
        log_extra = context.to_log_extra()
        log_extra.update({
            "remote_status_code": status_code,
            "remote_error_details": error_details,
            "endpoint": endpoint,
        })

        logger.error(
            f"Endpoint '{endpoint}' returned error {status_code}: {error_details}",
            **log_extra
        )
