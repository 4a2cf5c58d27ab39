"""Node API clients."""

from .client import APIClient, APIClientFactory, HTTPAPIClient, new_api_client

__all__ = [
    "APIClient",
    "APIClientFactory",
    "HTTPAPIClient",
    "new_api_client",
]
