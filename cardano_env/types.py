"""
Core value types for chain state.

Plain frozen dataclasses; conversion to pycardano types for transaction
building is provided where a builder needs them.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Sequence, Tuple

from pycardano import (
    Address,
    AssetName,
    ExecutionUnits,
    MultiAsset,
    ScriptHash,
    TransactionInput,
    TransactionOutput,
    UTxO,
    Value,
)
from pycardano import Asset as PolicyAssets

LOVELACE = "lovelace"
POLICY_ID_HEX_LENGTH = 56  # 28 bytes


@dataclass(frozen=True)
class Asset:
    """
    A native-token holding.

    Quantity is signed: mint/burn contexts upstream may carry negative amounts.
    """
    policy_id: bytes
    name: bytes
    quantity: int

    @property
    def policy_id_hex(self) -> str:
        return self.policy_id.hex()

    @property
    def name_hex(self) -> str:
        return self.name.hex()

    @property
    def unit(self) -> str:
        """Indexer unit string (policy id + hex name)."""
        return self.policy_id_hex + self.name_hex

    def __str__(self) -> str:
        try:
            label = self.name.decode("utf-8")
        except UnicodeDecodeError:
            label = self.name_hex[:8]
        return f"{self.quantity} {self.policy_id_hex[:8]}..{label}"


@dataclass(frozen=True)
class Balance:
    """Holdings of one UTxO: lovelace plus native assets in indexer order."""
    lovelace: int = 0
    assets: Tuple[Asset, ...] = ()

    def quantity_of(self, policy_id: bytes, name: bytes) -> int:
        return sum(a.quantity for a in self.assets if a.policy_id == policy_id and a.name == name)

    def to_value(self) -> Value:
        """Convert to a pycardano Value; repeated assets are summed."""
        grouped: Dict[bytes, Dict[bytes, int]] = {}
        for asset in self.assets:
            names = grouped.setdefault(asset.policy_id, {})
            names[asset.name] = names.get(asset.name, 0) + asset.quantity
        multi_asset = MultiAsset({
            ScriptHash(policy_id): PolicyAssets({AssetName(name): qty for name, qty in names.items()})
            for policy_id, names in grouped.items()
        })
        return Value(self.lovelace, multi_asset)


@dataclass(frozen=True)
class Utxo:
    """Spendable output. Identity is (tx_hash, output_index)."""
    tx_hash: str
    output_index: int
    address: str = field(compare=False)
    balance: Balance = field(compare=False)

    @property
    def utxo_id(self) -> str:
        return f"{self.tx_hash}#{self.output_index}"

    def to_pycardano(self) -> UTxO:
        """Convert to a pycardano UTxO for a TransactionBuilder."""
        tx_in = TransactionInput.from_primitive([self.tx_hash, self.output_index])
        tx_out = TransactionOutput(Address.from_primitive(self.address), self.balance.to_value())
        return UTxO(tx_in, tx_out)

    def __str__(self) -> str:
        return f"{self.tx_hash[:16]}..#{self.output_index} ({self.balance.lovelace} lovelace, {len(self.balance.assets)} assets)"


@dataclass(frozen=True)
class ScriptFailure:
    """A validator failure reported for one redeemer."""
    error: str
    traces: Tuple[str, ...] = ()


@dataclass(frozen=True, eq=True, unsafe_hash=False)
class EvaluationResult:
    """
    Outcome of a script-cost evaluation.

    Either `execution_units` (redeemer tag -> ExecutionUnits) or `failures`
    (redeemer tag -> script failures) is populated, never both.
    """
    execution_units: Mapping[str, ExecutionUnits] = field(default_factory=dict)
    failures: Mapping[str, Sequence[ScriptFailure]] = field(default_factory=dict)

    # Compared by value, never hashed
    __hash__ = None

    def __post_init__(self):
        if self.execution_units and self.failures:
            raise ValueError("EvaluationResult cannot carry both execution units and failures")
        object.__setattr__(self, "execution_units", MappingProxyType(dict(self.execution_units)))
        object.__setattr__(
            self, "failures", MappingProxyType({tag: tuple(f) for tag, f in self.failures.items()})
        )

    @property
    def succeeded(self) -> bool:
        return not self.failures

    @property
    def total_execution_units(self) -> ExecutionUnits:
        mem = sum(u.mem for u in self.execution_units.values())
        steps = sum(u.steps for u in self.execution_units.values())
        return ExecutionUnits(mem, steps)
