"""Indexer access: HTTP transport, response decoding and the Blockfrost client."""

from .blockfrost_client import NETWORK_URLS, BlockfrostClient, base_url_for
from .http import HttpTransport, RequestData, content_text, decode, raise_for_api_error

__all__ = [
    "BlockfrostClient", "NETWORK_URLS", "base_url_for",
    "HttpTransport", "RequestData", "content_text", "decode", "raise_for_api_error",
]
