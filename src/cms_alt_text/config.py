"""Configuration for CMS clients and usage analysis.

Clients take a plain dict config. Credentials are read from command-line
options first, then from the environment.
"""

import os
from dataclasses import dataclass

from cms_alt_text.clients import DEFAULT_BASE_URL
from cms_alt_text.usage.throttle import DEFAULT_REQUEST_DELAY

API_KEY_ENV = "CONTENTSTACK_API_KEY"
MANAGEMENT_TOKEN_ENV = "CONTENTSTACK_MANAGEMENT_TOKEN"
HOST_ENV = "CONTENTSTACK_HOST"

DEFAULT_CHUNK_SIZE = 10
DEFAULT_LOCALE = "en-us"
USER_AGENT = "cms-alt-text/1.0"


@dataclass
class AggregatorConfig:
    """Settings for batch usage analysis.

    Attributes:
        chunk_size: Images analyzed concurrently before moving to the next chunk
        request_delay: Seconds between consecutive entry fetches for one image
        default_locale: Locale assumed when neither image nor reference names one
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    request_delay: float = DEFAULT_REQUEST_DELAY
    default_locale: str = DEFAULT_LOCALE

    def __post_init__(self):
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        if self.request_delay < 0:
            raise ValueError("request_delay must not be negative")


def resolve_base_url(host: str | None) -> str:
    """Turn a Contentstack host name (e.g. ``eu-api.contentstack.com``) into a base URL."""
    if not host:
        return DEFAULT_BASE_URL
    if host.startswith(("http://", "https://")):
        return host.rstrip("/")
    return f"https://{host.rstrip('/')}/v3"


def build_client_config(
    api_key: str | None = None,
    management_token: str | None = None,
    host: str | None = None,
    timeout: float | None = None,
) -> dict:
    """Build a ContentstackClient config from options and the environment.

    Raises:
        ValueError: If the API key or management token is missing
    """
    api_key = api_key or os.environ.get(API_KEY_ENV)
    management_token = management_token or os.environ.get(MANAGEMENT_TOKEN_ENV)
    host = host or os.environ.get(HOST_ENV)

    if not api_key:
        raise ValueError(f"Missing Contentstack API key (--api-key or {API_KEY_ENV})")
    if not management_token:
        raise ValueError(
            f"Missing Contentstack management token (--management-token or {MANAGEMENT_TOKEN_ENV})"
        )

    config = {
        "base_url": resolve_base_url(host),
        "headers": {
            "api_key": api_key,
            "authorization": management_token,
            "User-Agent": USER_AGENT,
        },
    }
    if timeout is not None:
        config["timeout"] = timeout
    return config
