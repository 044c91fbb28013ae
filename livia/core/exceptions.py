from typing import List, Optional

from .error_handling.error_types import ErrorType


class LiviaError(Exception):
    """Base class for every error the service raises on purpose."""

    error_type = ErrorType.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception

    @property
    def error_code(self) -> str:
        return self.error_type.code

    @property
    def http_status(self) -> int:
        return self.error_type.status_code

    def to_error_detail(self) -> dict:
        return {"error": {"message": self.message, "code": self.error_code}}


class ChatError(LiviaError):
    """
    Failure of a single chat exchange.

    exchange_id is filled in by the session so callers can retry the
    transcript row the error belongs to.
    """

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message, original_exception)
        self.exchange_id: Optional[str] = None


class RequestTooLargeError(ChatError):
    error_type = ErrorType.REQUEST_TOO_LARGE

    def __init__(self, message: str, length: int, limit: int):
        super().__init__(message)
        self.length = length
        self.limit = limit


class NoCredentialError(ChatError):
    error_type = ErrorType.NO_CREDENTIAL


class BadResponseError(ChatError):
    """Non-2xx answer from the chat endpoint."""

    error_type = ErrorType.BAD_RESPONSE

    def __init__(self, message: str, status_code: int, provider_message: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.provider_message = provider_message


class TransportFailureError(ChatError):
    error_type = ErrorType.TRANSPORT_FAILURE


class DecodeFailureError(ChatError):
    error_type = ErrorType.DECODE_FAILURE


class EmptyMessageError(LiviaError, ValueError):
    error_type = ErrorType.EMPTY_MESSAGE


class ExchangeNotFoundError(LiviaError, LookupError):
    error_type = ErrorType.EXCHANGE_NOT_FOUND

    def __init__(self, message: str, exchange_id: str):
        super().__init__(message)
        self.exchange_id = exchange_id


class ExchangeNotRetryableError(LiviaError):
    error_type = ErrorType.EXCHANGE_NOT_RETRYABLE

    def __init__(self, message: str, exchange_id: str):
        super().__init__(message)
        self.exchange_id = exchange_id


class CredentialFetchError(LiviaError):
    """Raised by credential providers; the session reports it as NoCredentialError."""

    error_type = ErrorType.CREDENTIAL_FETCH_ERROR


class GraphQLError(LiviaError):
    error_type = ErrorType.GRAPHQL_INVALID_RESPONSE


class GraphQLInvalidResponseError(GraphQLError):
    error_type = ErrorType.GRAPHQL_INVALID_RESPONSE


class GraphQLHTTPError(GraphQLError):
    error_type = ErrorType.GRAPHQL_HTTP_ERROR

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class GraphQLQueryError(GraphQLError):
    error_type = ErrorType.GRAPHQL_QUERY_ERROR

    def __init__(self, messages: List[str]):
        super().__init__("\n".join(messages))
        self.messages = messages


class GraphQLNoDataError(GraphQLError):
    error_type = ErrorType.GRAPHQL_NO_DATA
