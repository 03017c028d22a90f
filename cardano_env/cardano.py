"""Cardano constants and slot/time conversion."""

from datetime import datetime, timezone
from decimal import Decimal

ADA_TO_LOVELACE = 1_000_000
ADA_ONLY_MIN_UTXO = 1_000_000  # lovelace

# Protocol parameter defaults, used when the indexer omits a field
PRICE_MEM = Decimal("0.0577")
PRICE_STEP = Decimal("0.0000721")
MAX_TX_EX_MEM = 14_000_000
MAX_TX_EX_STEPS = 10_000_000_000

# Mainnet Shelley hard fork: from here on one slot is one second
SHELLEY_SLOT = 4_924_800
SHELLEY_UNIX = 1_596_491_091


def ada_to_lovelace(ada: Decimal) -> int:
    return int(Decimal(ada) * ADA_TO_LOVELACE)


def lovelace_to_ada(lovelace: int) -> Decimal:
    return Decimal(lovelace) / ADA_TO_LOVELACE


def slot_from_unix_time(unix_time: int) -> int:
    return unix_time - SHELLEY_UNIX + SHELLEY_SLOT


def slot_from_datetime(moment: datetime) -> int:
    """Slot for an aware datetime (naive values are taken as UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return slot_from_unix_time(int(moment.timestamp()))


def utc_time_from_slot(slot: int) -> datetime:
    return datetime.fromtimestamp(SHELLEY_UNIX + (slot - SHELLEY_SLOT), tz=timezone.utc)
