"""Network clients for the Contentstack Management API."""

from .client import Client
from .contentstack_client import DEFAULT_BASE_URL, ContentstackClient
from .exceptions import (
    APIError,
    AuthenticationError,
    ClientError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

__all__ = [
    "Client",
    "ContentstackClient",
    "DEFAULT_BASE_URL",
    "ClientError",
    "ConnectionError",
    "APIError",
    "AuthenticationError",
    "RateLimitError",
    "NotFoundError",
    "ValidationError",
]
