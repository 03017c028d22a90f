"""Cached protocol parameters and chain tip."""

import asyncio
import logging
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from pycardano import ExecutionUnits

from cardano_env.blockchain.blockfrost_client import BlockfrostClient
from cardano_env.blockchain.models import BlockContent, EpochParameters
from cardano_env.errors import FormatError, SnapshotUnavailable
from . import cardano

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainTip:
    slot: int
    block_hash: str
    block_height: Optional[int] = None


@dataclass(frozen=True)
class ChainSnapshot:
    """Chain-wide facts from one refresh. Never updated in place."""
    epoch: int
    min_fee_a: int
    min_fee_b: int
    coins_per_utxo_word: int
    price_mem: Decimal
    price_step: Decimal
    max_tx_ex_mem: int
    max_tx_ex_steps: int
    tip: ChainTip

    @property
    def current_slot(self) -> int:
        return self.tip.slot

    def min_fee(self, tx_size: int) -> int:
        """Linear fee for a transaction of `tx_size` bytes, scripts excluded."""
        return self.min_fee_a * tx_size + self.min_fee_b

    def script_fee(self, units: ExecutionUnits) -> int:
        return math.ceil(self.price_mem * units.mem + self.price_step * units.steps)

    @classmethod
    def from_indexer(cls, params: EpochParameters, block: BlockContent) -> "ChainSnapshot":
        coins = params.coins_per_utxo_word or params.coins_per_utxo_size
        if coins is None:
            raise FormatError("Protocol parameters carry no coins-per-UTxO value")
        if block.slot is None:
            raise FormatError(f"Latest block {block.hash[:16]}... has no slot")
        return cls(
            epoch=params.epoch,
            min_fee_a=params.min_fee_a,
            min_fee_b=params.min_fee_b,
            coins_per_utxo_word=parse_natural(coins, "coins_per_utxo_word"),
            price_mem=params.price_mem if params.price_mem is not None else cardano.PRICE_MEM,
            price_step=params.price_step if params.price_step is not None else cardano.PRICE_STEP,
            max_tx_ex_mem=parse_natural(params.max_tx_ex_mem, "max_tx_ex_mem") if params.max_tx_ex_mem else cardano.MAX_TX_EX_MEM,
            max_tx_ex_steps=parse_natural(params.max_tx_ex_steps, "max_tx_ex_steps") if params.max_tx_ex_steps else cardano.MAX_TX_EX_STEPS,
            tip=ChainTip(slot=block.slot, block_hash=block.hash, block_height=block.height),
        )


def parse_natural(value: str, name: str) -> int:
    """Parse a non-negative integral decimal string such as "4310"."""
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise FormatError(f"{name} is not a number: {value!r}") from None
    if not number.is_finite() or number < 0 or number != number.to_integral_value():
        raise FormatError(f"{name} is not a non-negative integer: {value!r}")
    return int(number)


class ChainState:
    """
    Owner of the current ChainSnapshot.

    Empty until `refresh()` succeeds. A refresh either replaces the whole
    snapshot or leaves the previous one in place and raises.
    """

    def __init__(self, client: BlockfrostClient):
        self.client = client
        self._snapshot: Optional[ChainSnapshot] = None
        self._lock = asyncio.Lock()

    @property
    def snapshot(self) -> Optional[ChainSnapshot]:
        return self._snapshot

    def require(self) -> ChainSnapshot:
        if self._snapshot is None:
            raise SnapshotUnavailable("Chain snapshot not loaded; call refresh() first")
        return self._snapshot

    async def refresh(self) -> ChainSnapshot:
        async with self._lock:
            params = await self.client.get_latest_parameters()
            block = await self.client.get_latest_block()
            snapshot = ChainSnapshot.from_indexer(params, block)
            self._snapshot = snapshot
        logger.info(f"Chain snapshot refreshed: epoch {snapshot.epoch}, slot {snapshot.current_slot:,}")
        return snapshot
