"""UTxO fetching from the indexer."""

import asyncio
import logging
from typing import AsyncGenerator, Iterable, List, Optional

from cardano_env.blockchain.models import AddressUtxo
from cardano_env.errors import FormatError, IndexerError, NotFoundError, PageLimitExceeded
from cardano_env.types import Utxo
from .balance import aggregate
from .client import ChainClient

logger = logging.getLogger(__name__)

PAGE_SIZE = 100
MAX_PAGES = 1000
MAX_CONCURRENCY = 4


class UtxoFetcher:
    """Paginates address UTxOs from any ChainClient implementation."""

    def __init__(
        self,
        client: ChainClient,
        page_size: int = PAGE_SIZE,
        max_pages: int = MAX_PAGES,
        max_concurrency: int = MAX_CONCURRENCY,
    ):
        self.client = client
        self.page_size = page_size
        self.max_pages = max_pages
        self.max_concurrency = max_concurrency

    async def iter_utxos(
        self,
        address: str,
        asset: Optional[str] = None,
        order: str = "asc",
        max_pages: Optional[int] = None,
    ) -> AsyncGenerator[Utxo, None]:
        """
        Yield UTxOs page by page, starting from page 1.

        Stops at the first short page. After `max_pages` full pages one more
        page is requested; PageLimitExceeded is raised only if it is not empty.
        """
        if max_pages is None:
            max_pages = self.max_pages
        for page in range(1, max_pages + 1):
            entries = await self._page(address, asset, page, order)
            for entry in entries:
                if utxo := self._to_utxo(entry):
                    yield utxo
            if len(entries) < self.page_size:
                return
        if not await self._page(address, asset, max_pages + 1, order):
            return
        raise PageLimitExceeded(f"/addresses/{address}/utxos", max_pages)

    async def _page(self, address: str, asset: Optional[str], page: int, order: str) -> List[AddressUtxo]:
        entries = await self.client.get_address_utxos(
            address, asset, count=self.page_size, page=page, order=order
        )
        logger.debug(f"{address[:20]}... page {page}: {len(entries)} UTxOs")
        return entries

    def _to_utxo(self, entry: AddressUtxo) -> Optional[Utxo]:
        try:
            balance = aggregate(entry.amount)
        except FormatError as e:
            logger.error(f"Skipping UTxO {entry.tx_hash}#{entry.output_index}: {e}")
            return None
        return Utxo(
            tx_hash=entry.tx_hash,
            output_index=entry.output_index,
            address=entry.address,
            balance=balance,
        )

    async def fetch_for_address(self, address: str, asset: Optional[str] = None) -> List[Utxo]:
        """All UTxOs at an address, optionally only those holding `asset`."""
        return [utxo async for utxo in self.iter_utxos(address, asset)]

    async def fetch_for_addresses(
        self,
        addresses: Iterable[str],
        max_concurrency: Optional[int] = None,
    ) -> List[Utxo]:
        """
        Best-effort UTxOs across addresses, in address order.

        An address whose fetch fails is logged and contributes nothing.
        """
        semaphore = asyncio.Semaphore(max_concurrency or self.max_concurrency)

        async def fetch_one(address: str) -> List[Utxo]:
            async with semaphore:
                try:
                    return await self.fetch_for_address(address)
                except IndexerError as e:
                    logger.warning(f"Skipping address {address[:20]}...: {e}")
                    return []

        results = await asyncio.gather(*(fetch_one(a) for a in addresses))
        return [utxo for utxos in results for utxo in utxos]

    async def fetch_first(self, address: str, asset: str) -> Utxo:
        """Most recent UTxO at `address` holding `asset`."""
        utxos = self.iter_utxos(address, asset, order="desc")
        try:
            async for utxo in utxos:
                return utxo
        finally:
            await utxos.aclose()
        raise NotFoundError(f"No UTxO holding {asset[:16]}... at {address[:20]}...")
