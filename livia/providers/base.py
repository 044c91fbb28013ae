from typing import Dict, Any


class BaseCredentialProvider:
    """
    Source of the bearer token for the chat endpoint.

    Implementations fetch a fresh token on every call; caching and
    single-flight coordination live in CredentialCache.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    @property
    def name(self) -> str:
        return self.__class__.__name__.replace("CredentialProvider", "").lower()

    async def fetch(self) -> str:
        """
        Return a bearer token.

        Raises:
            CredentialFetchError: the token could not be obtained
        """
        raise NotImplementedError
