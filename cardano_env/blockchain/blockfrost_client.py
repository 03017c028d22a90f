"""Async client for the Blockfrost indexer HTTP API."""

import base64
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from cardano_env.errors import ApiError, IndexerError
from .http import DEFAULT_TIMEOUT, HttpTransport, RequestData, decode, raise_for_api_error
from .models import AddressUtxo, BlockContent, EpochParameters, EvaluatedTransaction

logger = logging.getLogger(__name__)

T = TypeVar("T")

NETWORK_URLS = {
    "mainnet": "https://cardano-mainnet.blockfrost.io/api/v0",
    "preprod": "https://cardano-preprod.blockfrost.io/api/v0",
    "preview": "https://cardano-preview.blockfrost.io/api/v0",
}

SORT_ORDERS = ("asc", "desc")


def base_url_for(network: str) -> str:
    try:
        return NETWORK_URLS[network.lower()]
    except KeyError:
        raise ValueError(f"Unknown Cardano network {network!r}, expected one of {sorted(NETWORK_URLS)}") from None


class BlockfrostClient:
    """Typed wrapper over the handful of Blockfrost endpoints the test harness needs."""

    def __init__(
        self,
        project_id: str,
        base_url: str = NETWORK_URLS["preprod"],
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[HttpTransport] = None,
    ):
        self.project_id = project_id
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport or HttpTransport()

    def _request_data(
        self,
        method: str,
        endpoint: str,
        parameters: Optional[str] = None,
        body: Optional[Union[str, bytes]] = None,
        content_type: str = "application/json",
    ) -> RequestData:
        return RequestData(
            uri=self.base_url,
            endpoint=endpoint,
            method=method,
            headers={"project_id": self.project_id},
            parameters=parameters,
            body=body,
            content_type=content_type,
            timeout=self.timeout,
        )

    async def _call(self, request: RequestData, type_: Type[T]) -> T:
        response = await self.transport.send(request)
        raise_for_api_error(response)
        return decode(response, type_)

    async def get_latest_parameters(self) -> EpochParameters:
        return await self._call(self._request_data("GET", "/epochs/latest/parameters"), EpochParameters)

    async def get_latest_block(self) -> BlockContent:
        return await self._call(self._request_data("GET", "/blocks/latest"), BlockContent)

    async def get_address_utxos(
        self,
        address: str,
        asset: Optional[str] = None,
        count: int = 100,
        page: int = 1,
        order: str = "asc",
    ) -> List[AddressUtxo]:
        """One page of an address's UTxOs, optionally filtered by asset unit."""
        if order not in SORT_ORDERS:
            raise ValueError(f"order must be one of {SORT_ORDERS}, got {order!r}")
        endpoint = f"/addresses/{address}/utxos"
        if asset:
            endpoint += f"/{asset}"
        request = self._request_data("GET", endpoint, parameters=f"count={count}&page={page}&order={order}")
        try:
            return await self._call(request, List[AddressUtxo])
        except ApiError as e:
            # Blockfrost answers 404 for addresses it has never seen
            if e.status_code == 404:
                logger.debug(f"No UTxOs indexed for {address[:20]}... page {page}")
                return []
            raise

    async def submit_transaction(self, tx_bytes: bytes) -> str:
        """Submit a signed transaction; returns its id."""
        request = self._request_data("POST", "/tx/submit", body=tx_bytes, content_type="application/cbor")
        return await self._call(request, str)

    async def evaluate_transaction(self, tx_bytes: bytes) -> EvaluatedTransaction:
        """Dry-run script evaluation; the body is base64-encoded CBOR."""
        body = base64.b64encode(tx_bytes).decode("ascii")
        request = self._request_data("POST", "/utils/txs/evaluate", body=body, content_type="application/cbor")
        return await self._call(request, EvaluatedTransaction)

    async def health_check(self) -> Dict[str, Any]:
        """Status dict with the chain tip, or the error when the indexer is unusable."""
        try:
            block = await self.get_latest_block()
            return {"status": "healthy", "tip": {"slot": block.slot, "hash": block.hash, "height": block.height}}
        except IndexerError as e:
            return {"status": "unhealthy", "error": str(e)}
