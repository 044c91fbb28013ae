import json
import os
from typing import Dict, Any

import httpx

from .base import BaseCredentialProvider
from ..core.exceptions import GraphQLError
from ..core.logging import logger
from ..core.error_handling import ErrorHandler, ErrorContext
from ..services.graphql_client import GraphQLClient
from ..services.queries import API_KEY_TEMPLATE


class GraphQLCredentialProvider(BaseCredentialProvider):
    """Exchanges a shared passphrase for an API key: `{ apiKey(passphrase: "...") }`."""

    def __init__(self, config: Dict[str, Any], graphql_client: GraphQLClient):
        super().__init__(config)
        self.graphql_client = graphql_client
        self.passphrase_env = config.get("passphrase_env", "LIVIA_PASSPHRASE")

    async def fetch(self) -> str:
        context = ErrorContext(request_id="credential", component="graphql_credential_provider")

        passphrase = os.environ.get(self.passphrase_env)
        if not passphrase:
            raise ErrorHandler.handle_credential_fetch_error(
                error_details=f"Passphrase {self.passphrase_env} is not set in environment variables.",
                context=context
            )

        query = API_KEY_TEMPLATE.format(passphrase=json.dumps(passphrase))
        try:
            data = await self.graphql_client.execute(query, request_id="credential")
        except (GraphQLError, httpx.RequestError) as e:
            raise ErrorHandler.handle_credential_fetch_error(
                error_details=str(e) or type(e).__name__,
                context=context,
                original_exception=e
            ) from e

        api_key = data.get("apiKey") if isinstance(data, dict) else None
        if not isinstance(api_key, str) or not api_key:
            raise ErrorHandler.handle_credential_fetch_error(
                error_details="Invalid response format: data.apiKey missing",
                context=context
            )

        logger.info("livia API key received", component="graphql_credential_provider")
        return api_key
