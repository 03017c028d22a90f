"""
Chain-state client for the Cardano transaction-building test environment.

Structure:
    cardano_env/
    ├── types.py          # Asset, Balance, Utxo, EvaluationResult
    ├── errors.py         # IndexerError hierarchy
    ├── blockchain/       # HTTP transport, decoding, Blockfrost client
    ├── fetching/         # Balance aggregation, UTxO pagination
    ├── snapshot.py       # Protocol parameters + tip cache
    ├── transactions.py   # Submit / evaluate
    ├── wallet.py         # HD wallet keys and minting policy
    └── cardano.py        # Constants, slot/time conversion

Usage:
    from cardano_env import BlockfrostClient, ChainState, UtxoFetcher, TransactionService
"""

from .blockchain import BlockfrostClient, HttpTransport, RequestData
from .errors import (
    ApiError,
    DecodeError,
    FormatError,
    IndexerError,
    NotFoundError,
    PageLimitExceeded,
    SnapshotUnavailable,
    TransportError,
    TransportTimeout,
)
from .fetching import UtxoFetcher, aggregate
from .snapshot import ChainSnapshot, ChainState, ChainTip
from .transactions import Outcome, TransactionService
from .types import Asset, Balance, EvaluationResult, ScriptFailure, Utxo

__all__ = [
    # Types
    "Asset", "Balance", "Utxo", "EvaluationResult", "ScriptFailure",
    # Indexer access
    "BlockfrostClient", "HttpTransport", "RequestData",
    "UtxoFetcher", "aggregate",
    "ChainState", "ChainSnapshot", "ChainTip",
    "TransactionService", "Outcome",
    # Errors
    "IndexerError", "TransportError", "TransportTimeout", "DecodeError", "ApiError",
    "FormatError", "NotFoundError", "PageLimitExceeded", "SnapshotUnavailable",
]
