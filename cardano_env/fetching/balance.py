"""Build a Balance from the amount list the indexer attaches to a UTxO."""

import re
from typing import Iterable, List, Mapping, Union

from cardano_env.blockchain.models import AssetAmount
from cardano_env.errors import FormatError
from cardano_env.types import LOVELACE, POLICY_ID_HEX_LENGTH, Asset, Balance

UINT64_MAX = 2**64 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_UNSIGNED = re.compile(r"[0-9]+")
_SIGNED = re.compile(r"-?[0-9]+")
_HEX = re.compile(r"[0-9a-fA-F]*")

RawAmount = Union[AssetAmount, Mapping[str, str]]


def _fields(amount: RawAmount) -> tuple[str, str]:
    if isinstance(amount, AssetAmount):
        return amount.unit, amount.quantity
    try:
        return str(amount["unit"]), str(amount["quantity"])
    except (KeyError, TypeError) as e:
        raise FormatError(f"Amount entry missing unit/quantity: {amount!r}") from e


def parse_lovelace(quantity: str) -> int:
    if not _UNSIGNED.fullmatch(quantity):
        raise FormatError(f"Lovelace quantity is not an unsigned integer: {quantity!r}")
    value = int(quantity)
    if value > UINT64_MAX:
        raise FormatError(f"Lovelace quantity overflows 64 bits: {quantity}")
    return value


def parse_asset_quantity(quantity: str) -> int:
    if not _SIGNED.fullmatch(quantity):
        raise FormatError(f"Asset quantity is not an integer: {quantity!r}")
    value = int(quantity)
    if not INT64_MIN <= value <= INT64_MAX:
        raise FormatError(f"Asset quantity overflows signed 64 bits: {quantity}")
    return value


def parse_unit(unit: str) -> tuple[bytes, bytes]:
    """Split a unit into (policy id, asset name) bytes."""
    if len(unit) < POLICY_ID_HEX_LENGTH:
        raise FormatError(f"Asset unit shorter than a policy id: {unit!r}")
    if not _HEX.fullmatch(unit) or len(unit) % 2:
        raise FormatError(f"Asset unit is not hex-encoded: {unit!r}")
    return bytes.fromhex(unit[:POLICY_ID_HEX_LENGTH]), bytes.fromhex(unit[POLICY_ID_HEX_LENGTH:])


def aggregate(amounts: Iterable[RawAmount]) -> Balance:
    """
    Aggregate raw amounts into a Balance.

    Lovelace entries are summed; every other entry becomes an Asset, in input
    order. Raises FormatError on any malformed entry.
    """
    lovelace = 0
    assets: List[Asset] = []
    for amount in amounts:
        unit, quantity = _fields(amount)
        if unit == LOVELACE:
            lovelace += parse_lovelace(quantity)
            if lovelace > UINT64_MAX:
                raise FormatError(f"Lovelace total overflows 64 bits: {lovelace}")
            continue
        policy_id, name = parse_unit(unit)
        assets.append(Asset(policy_id=policy_id, name=name, quantity=parse_asset_quantity(quantity)))
    return Balance(lovelace=lovelace, assets=tuple(assets))
