"""
GraphQL client for the Livia content endpoint.

Single endpoint, POST + JSON, no caching and no retries: every call either
returns the `data` object or raises a GraphQLError subclass.
"""

import json
import time
from typing import Dict, Any, Optional

import httpx

from ..core.logging import logger
from ..core.error_handling import ErrorHandler, ErrorContext


class GraphQLClient:
    def __init__(self, endpoint: str, client: httpx.AsyncClient, timeout: float = 30.0):
        self.endpoint = endpoint
        self.client = client
        self.timeout = httpx.Timeout(timeout, connect=10.0)
        self.headers = {"Content-Type": "application/json"}

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None, request_id: str = "graphql") -> Dict[str, Any]:
        """
        Run one query and return its `data` object.

        Raises:
            GraphQLHTTPError: non-2xx status
            GraphQLInvalidResponseError: body is not a JSON object
            GraphQLQueryError: the response carries a non-empty `errors` list
            GraphQLNoDataError: `data` is missing or null
            httpx.RequestError: network failure, left to the caller
        """
        context = ErrorContext(request_id=request_id, component="graphql_client", endpoint=self.endpoint)

        body: Dict[str, Any] = {"query": query}
        if variables:
            body["variables"] = variables

        logger.debug_data(
            title="GraphQL Request",
            data=body,
            request_id=request_id,
            component="graphql_client",
            data_flow="to_endpoint"
        )

        start_time = time.time()
        response = await self.client.post(self.endpoint, headers=self.headers, json=body, timeout=self.timeout)

        if not response.is_success:
            raise ErrorHandler.handle_graphql_http_error(response.status_code, response.text, context)

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise ErrorHandler.handle_graphql_invalid_response(context, e) from e

        if not isinstance(payload, dict):
            raise ErrorHandler.handle_graphql_invalid_response(context)

        errors = payload.get("errors")
        if errors:
            messages = [
                error.get("message", str(error)) if isinstance(error, dict) else str(error)
                for error in errors
            ]
            raise ErrorHandler.handle_graphql_query_error(messages, context)

        data = payload.get("data")
        if data is None:
            raise ErrorHandler.handle_graphql_no_data(context)

        logger.performance("GraphQL query", start_time, request_id=request_id, component="graphql_client")
        return data
