"""Chain client protocol for fetching UTxO pages."""

from typing import List, Optional, Protocol

from cardano_env.blockchain.models import AddressUtxo


class ChainClient(Protocol):
    """
    Interface for indexers that page through an address's UTxOs.

    BlockfrostClient implements it; tests substitute in-memory indexers.
    """

    async def get_address_utxos(
        self,
        address: str,
        asset: Optional[str] = None,
        count: int = 100,
        page: int = 1,
        order: str = "asc",
    ) -> List[AddressUtxo]:
        """Fetch one page (1-based) of UTxOs; an empty list past the last page."""
        ...
