"""Tests for the chain snapshot cache."""

from decimal import Decimal

import httpx
import pytest
from pycardano import ExecutionUnits

from cardano_env import cardano
from cardano_env.errors import ApiError, FormatError, SnapshotUnavailable, TransportError
from cardano_env.snapshot import ChainState, parse_natural
from tests.indexer import RecordingIndexer, error_response, json_response

PARAMETERS = {
    "epoch": 112,
    "min_fee_a": 44,
    "min_fee_b": 155381,
    "max_tx_size": 16384,
    "coins_per_utxo_word": "4310",
    "coins_per_utxo_size": "4310",
    "price_mem": 0.0577,
    "price_step": 0.0000721,
    "max_tx_ex_mem": "14000000",
    "max_tx_ex_steps": "10000000000",
    "key_deposit": "2000000",
}

BLOCK = {
    "time": 1700000000,
    "height": 1_900_000,
    "hash": "4ea1ba291e8eef538635a53e59fddba7810d1679631cc3aed7c8e6c4091a516a",
    "slot": 44_000_000,
    "epoch": 112,
    "epoch_slot": 12,
    "tx_count": 3,
}


def serve(indexer: RecordingIndexer, parameters=PARAMETERS, block=BLOCK) -> None:
    indexer.route("/epochs/latest/parameters", lambda r: json_response(parameters))
    indexer.route("/blocks/latest", lambda r: json_response(block))


class TestChainState:
    """Tests for ChainState.refresh."""

    @pytest.mark.asyncio
    async def test_refresh_parses_parameters_and_tip(self, indexer: RecordingIndexer) -> None:
        serve(indexer)
        state = ChainState(indexer.client())
        snapshot = await state.refresh()

        assert state.snapshot is snapshot
        assert snapshot.epoch == 112
        assert snapshot.min_fee_a == 44
        assert snapshot.min_fee_b == 155381
        assert snapshot.coins_per_utxo_word == 4310
        assert snapshot.price_mem == Decimal("0.0577")
        assert snapshot.max_tx_ex_steps == 10_000_000_000
        assert snapshot.current_slot == 44_000_000
        assert snapshot.tip.block_hash == BLOCK["hash"]
        assert snapshot.tip.block_height == 1_900_000
        assert [r.url.path for r in indexer.requests] == [
            "/api/v0/epochs/latest/parameters",
            "/api/v0/blocks/latest",
        ]

    @pytest.mark.asyncio
    async def test_stale_until_first_refresh(self, indexer: RecordingIndexer) -> None:
        state = ChainState(indexer.client())
        assert state.snapshot is None
        with pytest.raises(SnapshotUnavailable):
            state.require()

    @pytest.mark.asyncio
    async def test_tip_failure_keeps_previous_snapshot(self, indexer: RecordingIndexer) -> None:
        serve(indexer)
        state = ChainState(indexer.client())
        previous = await state.refresh()

        indexer.route("/epochs/latest/parameters", lambda r: json_response({**PARAMETERS, "min_fee_a": 99}))
        indexer.route("/blocks/latest", lambda r: error_response(500, "Internal error"))
        with pytest.raises(ApiError):
            await state.refresh()

        assert state.snapshot is previous
        assert state.require().min_fee_a == 44

    @pytest.mark.asyncio
    async def test_failure_before_first_refresh_leaves_empty(self, indexer: RecordingIndexer) -> None:
        def unreachable(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        indexer.route("/epochs/latest/parameters", lambda r: json_response(PARAMETERS))
        indexer.route("/blocks/latest", unreachable)
        state = ChainState(indexer.client())
        with pytest.raises(TransportError):
            await state.refresh()
        assert state.snapshot is None

    @pytest.mark.asyncio
    async def test_falls_back_to_coins_per_utxo_size(self, indexer: RecordingIndexer) -> None:
        serve(indexer, parameters={**PARAMETERS, "coins_per_utxo_word": None})
        snapshot = await ChainState(indexer.client()).refresh()
        assert snapshot.coins_per_utxo_word == 4310

    @pytest.mark.asyncio
    async def test_missing_prices_use_defaults(self, indexer: RecordingIndexer) -> None:
        params = {k: v for k, v in PARAMETERS.items() if k not in ("price_mem", "price_step", "max_tx_ex_mem")}
        serve(indexer, parameters=params)
        snapshot = await ChainState(indexer.client()).refresh()
        assert snapshot.price_mem == cardano.PRICE_MEM
        assert snapshot.price_step == cardano.PRICE_STEP
        assert snapshot.max_tx_ex_mem == cardano.MAX_TX_EX_MEM

    @pytest.mark.asyncio
    async def test_non_numeric_coins_rejected(self, indexer: RecordingIndexer) -> None:
        serve(indexer, parameters={**PARAMETERS, "coins_per_utxo_word": "lots"})
        state = ChainState(indexer.client())
        with pytest.raises(FormatError):
            await state.refresh()
        assert state.snapshot is None


class TestSnapshotFees:
    """Tests for the fee helpers on ChainSnapshot."""

    @pytest.mark.asyncio
    async def test_min_fee_and_script_fee(self, indexer: RecordingIndexer) -> None:
        serve(indexer)
        snapshot = await ChainState(indexer.client()).refresh()
        assert snapshot.min_fee(300) == 44 * 300 + 155381
        # 0.0577 * 1000 + 0.0000721 * 1000000 = 57.7 + 72.1
        assert snapshot.script_fee(ExecutionUnits(1000, 1_000_000)) == 130


@pytest.mark.parametrize("value,expected", [("4310", 4310), ("0", 0), ("34482.0", 34482)])
def test_parse_natural(value: str, expected: int) -> None:
    assert parse_natural(value, "field") == expected


@pytest.mark.parametrize("value", ["-1", "1.5", "NaN", "abc"])
def test_parse_natural_rejects(value: str) -> None:
    with pytest.raises(FormatError):
        parse_natural(value, "field")
