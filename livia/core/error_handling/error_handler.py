"""
Main Error Handler

Creates the service's typed exceptions with consistent messages and logging,
and converts them to HTTPExceptions for the API layer.
"""

import json
from typing import Optional

from fastapi import HTTPException

from .error_types import ErrorType, ErrorContext
from .error_logger import ErrorLogger
from .. import exceptions

# Cap on raw error body text copied into messages and logs
MAX_ERROR_BODY_CHARS = 500


def extract_error_message(body_text: str) -> Optional[str]:
    """
    Pull the human readable message out of an error body.

    Understands the OpenAI style {"error": {"message": ...}} payload and a bare
    {"message": ...}. Returns None when the body carries no structured message.
    """
    if not body_text:
        return None
    try:
        payload = json.loads(body_text)
    except (json.JSONDecodeError, ValueError):
        return None

    if not isinstance(payload, dict):
        return None

    error = payload.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    if isinstance(error, str):
        return error
    if isinstance(payload.get("message"), str):
        return payload["message"]
    return None


class ErrorHandler:
    """Centralized error handling utility."""

    @staticmethod
    def handle_empty_message(context: ErrorContext) -> "exceptions.EmptyMessageError":
        message = ErrorType.EMPTY_MESSAGE.format_message()
        ErrorLogger.log_error(ErrorType.EMPTY_MESSAGE, message, context)
        return exceptions.EmptyMessageError(message)

    @staticmethod
    def handle_request_too_large(length: int, limit: int, context: ErrorContext) -> "exceptions.RequestTooLargeError":
        message = ErrorType.REQUEST_TOO_LARGE.format_message(max_chars=limit)
        ErrorLogger.log_error(
            ErrorType.REQUEST_TOO_LARGE,
            message,
            context,
            additional_data={"text_length": length, "max_chars": limit}
        )
        return exceptions.RequestTooLargeError(message, length=length, limit=limit)

    @staticmethod
    def handle_no_credential(
        context: ErrorContext,
        original_exception: Optional[Exception] = None
    ) -> "exceptions.NoCredentialError":
        message = ErrorType.NO_CREDENTIAL.format_message()
        ErrorLogger.log_error(ErrorType.NO_CREDENTIAL, message, context, original_exception)
        return exceptions.NoCredentialError(message, original_exception)

    @staticmethod
    def handle_credential_fetch_error(
        error_details: str,
        context: ErrorContext,
        original_exception: Optional[Exception] = None
    ) -> "exceptions.CredentialFetchError":
        message = ErrorType.CREDENTIAL_FETCH_ERROR.format_message(error_details=error_details)
        ErrorLogger.log_error(ErrorType.CREDENTIAL_FETCH_ERROR, message, context, original_exception)
        return exceptions.CredentialFetchError(message, original_exception)

    @staticmethod
    def handle_bad_response(
        status_code: int,
        body_text: str,
        context: ErrorContext,
        endpoint: str = "chat"
    ) -> "exceptions.BadResponseError":
        """
        Classify a non-2xx chat endpoint answer.

        The message is the structured {"error": {"message"}} text when the body
        has one, otherwise the (truncated) raw body.
        """
        body_text = body_text or ""
        provider_message = extract_error_message(body_text)
        details = provider_message or body_text.strip()[:MAX_ERROR_BODY_CHARS]

        message = ErrorType.BAD_RESPONSE.format_message(remote_status=status_code)
        if details:
            message = f"{message}, {details}"

        ErrorLogger.log_remote_error(endpoint, status_code, details or "<empty body>", context)
        return exceptions.BadResponseError(message, status_code=status_code, provider_message=provider_message)

    @staticmethod
    def handle_transport_failure(
        original_exception: Exception,
        context: ErrorContext
    ) -> "exceptions.TransportFailureError":
        details = str(original_exception) or type(original_exception).__name__
        message = ErrorType.TRANSPORT_FAILURE.format_message(error_details=details)
        ErrorLogger.log_error(ErrorType.TRANSPORT_FAILURE, message, context, original_exception)
        return exceptions.TransportFailureError(message, original_exception)

    @staticmethod
    def handle_decode_failure(
        error_details: str,
        context: ErrorContext,
        original_exception: Optional[Exception] = None
    ) -> "exceptions.DecodeFailureError":
        message = ErrorType.DECODE_FAILURE.format_message(error_details=error_details)
        ErrorLogger.log_error(ErrorType.DECODE_FAILURE, message, context, original_exception)
        return exceptions.DecodeFailureError(message, original_exception)

    @staticmethod
    def handle_exchange_not_found(exchange_id: str, context: ErrorContext) -> "exceptions.ExchangeNotFoundError":
        message = ErrorType.EXCHANGE_NOT_FOUND.format_message(exchange_id=exchange_id)
        ErrorLogger.log_error(ErrorType.EXCHANGE_NOT_FOUND, message, context)
        return exceptions.ExchangeNotFoundError(message, exchange_id=exchange_id)

    @staticmethod
    def handle_exchange_not_retryable(exchange_id: str, context: ErrorContext) -> "exceptions.ExchangeNotRetryableError":
        message = ErrorType.EXCHANGE_NOT_RETRYABLE.format_message(exchange_id=exchange_id)
        ErrorLogger.log_error(ErrorType.EXCHANGE_NOT_RETRYABLE, message, context)
        return exceptions.ExchangeNotRetryableError(message, exchange_id=exchange_id)

    @staticmethod
    def handle_graphql_http_error(status_code: int, body_text: str, context: ErrorContext) -> "exceptions.GraphQLHTTPError":
        ErrorLogger.log_remote_error("graphql", status_code, (body_text or "")[:MAX_ERROR_BODY_CHARS], context)
        message = ErrorType.GRAPHQL_HTTP_ERROR.format_message(remote_status=status_code)
        return exceptions.GraphQLHTTPError(message, status_code=status_code)

    @staticmethod
    def handle_graphql_invalid_response(
        context: ErrorContext,
        original_exception: Optional[Exception] = None
    ) -> "exceptions.GraphQLInvalidResponseError":
        message = ErrorType.GRAPHQL_INVALID_RESPONSE.format_message()
        ErrorLogger.log_error(ErrorType.GRAPHQL_INVALID_RESPONSE, message, context, original_exception)
        return exceptions.GraphQLInvalidResponseError(message, original_exception)

    @staticmethod
    def handle_graphql_query_error(messages: list, context: ErrorContext) -> "exceptions.GraphQLQueryError":
        error = exceptions.GraphQLQueryError(messages)
        ErrorLogger.log_error(ErrorType.GRAPHQL_QUERY_ERROR, error.message, context)
        return error

    @staticmethod
    def handle_graphql_no_data(context: ErrorContext) -> "exceptions.GraphQLNoDataError":
        message = ErrorType.GRAPHQL_NO_DATA.format_message()
        ErrorLogger.log_error(ErrorType.GRAPHQL_NO_DATA, message, context)
        return exceptions.GraphQLNoDataError(message)

    @staticmethod
    def to_http_exception(error: "exceptions.LiviaError") -> HTTPException:
        """Convert an already logged service error to an HTTPException."""
        return HTTPException(status_code=error.http_status, detail=error.to_error_detail())

    @staticmethod
    def handle_internal_server_error(
        error_details: str,
        context: ErrorContext,
        original_exception: Optional[Exception] = None
    ) -> HTTPException:
        error_type = ErrorType.INTERNAL_SERVER_ERROR
        message = error_type.format_message(error_details=error_details)
        ErrorLogger.log_error(error_type, message, context, original_exception)
        return HTTPException(
            status_code=error_type.status_code,
            detail=error_type.create_error_detail(error_details=error_details)
        )
