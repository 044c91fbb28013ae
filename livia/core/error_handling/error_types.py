"""
Error Types and Context Definitions

Standard error types and context information shared by the chat session, the
GraphQL client and the HTTP layer.
"""

from enum import Enum
from typing import Dict, Any, Optional
from fastapi import status


class ErrorType(Enum):
    """Enumeration of standard error types in the system."""

    # Caller errors
    EMPTY_MESSAGE = ("empty_message", status.HTTP_400_BAD_REQUEST, "Message text must not be empty")
    REQUEST_TOO_LARGE = ("request_too_large", status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "Long Response: Max character limit of {max_chars}")
    EXCHANGE_NOT_FOUND = ("exchange_not_found", status.HTTP_404_NOT_FOUND, "Exchange '{exchange_id}' not found")
    EXCHANGE_NOT_RETRYABLE = ("exchange_not_retryable", status.HTTP_409_CONFLICT, "Exchange '{exchange_id}' has not failed and cannot be retried")

    # Credential errors
    NO_CREDENTIAL = ("no_credential", status.HTTP_503_SERVICE_UNAVAILABLE, "API key not yet loaded. Please try again in a moment.")
    CREDENTIAL_FETCH_ERROR = ("credential_fetch_error", status.HTTP_503_SERVICE_UNAVAILABLE, "Credential fetch failed: {error_details}")

    # Chat endpoint errors
    BAD_RESPONSE = ("bad_response", status.HTTP_502_BAD_GATEWAY, "Bad Response: {remote_status}")
    TRANSPORT_FAILURE = ("transport_failure", status.HTTP_504_GATEWAY_TIMEOUT, "Network error communicating with chat endpoint: {error_details}")
    DECODE_FAILURE = ("decode_failure", status.HTTP_502_BAD_GATEWAY, "Could not decode chat completion: {error_details}")

    # GraphQL content errors
    GRAPHQL_INVALID_RESPONSE = ("graphql_invalid_response", status.HTTP_502_BAD_GATEWAY, "Invalid response from server")
    GRAPHQL_HTTP_ERROR = ("graphql_http_error", status.HTTP_502_BAD_GATEWAY, "HTTP error: {remote_status}")
    GRAPHQL_QUERY_ERROR = ("graphql_query_error", status.HTTP_502_BAD_GATEWAY, "{error_details}")
    GRAPHQL_NO_DATA = ("graphql_no_data", status.HTTP_502_BAD_GATEWAY, "No data returned")

    INTERNAL_SERVER_ERROR = ("internal_server_error", status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error: {error_details}")

    def __init__(self, code: str, status_code: int, message_template: str):
        self.code = code
        self.status_code = status_code
        self.message_template = message_template

    def format_message(self, **kwargs) -> str:
        """Format the error message with provided parameters."""
        try:
            return self.message_template.format(**kwargs)
        except KeyError:
            return self.message_template

    def create_error_detail(self, **kwargs) -> Dict[str, Any]:
        """Create standardized error detail dictionary."""
        return {
            "error": {
                "message": self.format_message(**kwargs),
                "code": self.code
            }
        }


class ErrorContext:
    """Context information for error handling."""

    def __init__(
        self,
        request_id: Optional[str] = None,
        exchange_id: Optional[str] = None,
        component: Optional[str] = None,
        endpoint: Optional[str] = None,
        **additional_context
    ):
        self.request_id = request_id
        self.exchange_id = exchange_id
        self.component = component
        self.endpoint = endpoint
        self.additional_context = additional_context

    def to_log_extra(self) -> Dict[str, Any]:
        """Convert context to logging extra dictionary."""
        extra = {
            "log_type": "error"
        }

        if self.request_id:
            extra["request_id"] = self.request_id
        if self.exchange_id:
            extra["exchange_id"] = self.exchange_id
        if self.component:
            extra["component"] = self.component
        if self.endpoint:
            extra["endpoint"] = self.endpoint

        extra.update(self.additional_context)
        return extra
