import os

from .base import BaseCredentialProvider
from ..core.error_handling import ErrorHandler, ErrorContext


class EnvCredentialProvider(BaseCredentialProvider):
    """Reads the API key from an environment variable at fetch time."""

    async def fetch(self) -> str:
        api_key_env = self.config.get("api_key_env", "LIVIA_API_KEY")
        api_key = os.environ.get(api_key_env)
        if not api_key:
            raise ErrorHandler.handle_credential_fetch_error(
                error_details=f"API key for {api_key_env} is not set in environment variables.",
                context=ErrorContext(request_id="credential", component="env_credential_provider")
            )
        return api_key
