"""HTTP client factory for the KOSIS Open API."""

from __future__ import annotations

from typing import Optional

import httpx

from kosis_extractor.core.config import settings
from kosis_extractor.core.exceptions import ConfigurationError

DEFAULT_TIMEOUT_SECONDS = 30.0
RESPONSE_FORMAT = "json"


def create_api_client(
    api_key: Optional[str],
    *,
    base_url: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Build an ``httpx.AsyncClient`` that sends the API key and format with every call."""
    if not api_key or not api_key.strip():
        raise ConfigurationError("KOSIS API Key is required. Please set KOSIS_API_KEY environment variable.")

    return httpx.AsyncClient(
        base_url=base_url or settings.KOSIS_BASE_URL,
        timeout=httpx.Timeout(timeout),
        params={"apiKey": api_key.strip(), "format": RESPONSE_FORMAT},
        transport=transport,
    )
