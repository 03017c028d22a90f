"""UTxO fetching and balance aggregation."""

from .balance import aggregate
from .client import ChainClient
from .fetcher import MAX_PAGES, PAGE_SIZE, UtxoFetcher

__all__ = ["ChainClient", "UtxoFetcher", "aggregate", "PAGE_SIZE", "MAX_PAGES"]
