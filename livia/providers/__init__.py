from typing import Dict, Any

from .base import BaseCredentialProvider
from .graphql import GraphQLCredentialProvider
from .env import EnvCredentialProvider
from ..services.graphql_client import GraphQLClient


def get_credential_provider(provider_type: str, provider_config: Dict[str, Any], graphql_client: GraphQLClient = None) -> BaseCredentialProvider:
    if provider_type == "graphql":
        if graphql_client is None:
            raise ValueError("graphql credential provider needs a GraphQLClient")
        return GraphQLCredentialProvider(provider_config, graphql_client)
    elif provider_type == "env":
        return EnvCredentialProvider(provider_config)
    else:
        raise ValueError(f"Unknown credential provider type: {provider_type}")


__all__ = [
    "BaseCredentialProvider",
    "GraphQLCredentialProvider",
    "EnvCredentialProvider",
    "get_credential_provider",
]
