"""Transaction submission and script-cost evaluation."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from pycardano import ExecutionUnits

from cardano_env.blockchain.blockfrost_client import BlockfrostClient
from cardano_env.blockchain.models import EvaluatedTransaction, ScriptFailureEntry
from cardano_env.errors import ApiError, DecodeError, FormatError, IndexerError, error_message
from cardano_env.types import EvaluationResult, ScriptFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or the error that prevented obtaining one."""
    value: Optional[T] = None
    error: Optional[IndexerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return error_message(self.error)

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


def transaction_bytes(tx: Any) -> bytes:
    """
    Serialized bytes of a transaction.

    Accepts raw bytes, objects with `serialize() -> bytes`, or pycardano
    objects with `to_cbor()`.
    """
    if isinstance(tx, (bytes, bytearray)):
        return bytes(tx)
    if hasattr(tx, "serialize"):
        data = tx.serialize()
    elif hasattr(tx, "to_cbor"):
        data = tx.to_cbor()
    else:
        raise TypeError(f"Cannot serialize {type(tx).__name__}: expected bytes, serialize() or to_cbor()")
    return bytes.fromhex(data) if isinstance(data, str) else bytes(data)


def _encoded(tx: Any) -> bytes:
    try:
        return transaction_bytes(tx)
    except Exception as e:
        raise FormatError(f"Cannot serialize transaction: {e}") from e


def _script_failure(entry: ScriptFailureEntry) -> ScriptFailure:
    if entry.validator_failed is not None:
        return ScriptFailure(
            error=entry.validator_failed.error or "",
            traces=tuple(entry.validator_failed.traces or ()),
        )
    # Non-validator failures (missing datums, extra redeemers...) keep their raw shape
    return ScriptFailure(error=json.dumps(entry.model_extra or {}, sort_keys=True))


def evaluation_from_response(evaluated: EvaluatedTransaction) -> EvaluationResult:
    """Map the evaluate envelope onto EvaluationResult; failures take precedence."""
    if evaluated.fault:
        raise ApiError(200, str(evaluated.fault.get("string", evaluated.fault)), structured=True)
    result = evaluated.result
    if result is None:
        raise DecodeError("Evaluation response carries no result")

    if result.evaluation_failure is not None:
        failure = result.evaluation_failure
        failures: Dict[str, List[ScriptFailure]] = {}
        for tag, entries in (failure.script_failures or {}).items():
            failures[tag] = [_script_failure(e) for e in entries]
        for kind, detail in (failure.model_extra or {}).items():
            failures[kind] = [ScriptFailure(error=json.dumps(detail, sort_keys=True))]
        if not failures:
            raise DecodeError("Evaluation failure without detail")
        return EvaluationResult(failures=failures)

    if result.evaluation_result is None:
        raise DecodeError("Evaluation response has neither EvaluationResult nor EvaluationFailure")
    return EvaluationResult(execution_units={
        tag: ExecutionUnits(units.memory, units.steps)
        for tag, units in result.evaluation_result.items()
    })


class TransactionService:
    """Submits transactions and asks the indexer what their scripts cost."""

    def __init__(self, client: BlockfrostClient):
        self.client = client

    async def submit(self, tx: Union[bytes, Any]) -> Outcome[str]:
        """Submit once; submission is not retried."""
        try:
            tx_id = await self.client.submit_transaction(_encoded(tx))
        except IndexerError as e:
            logger.error(f"Transaction submission failed: {error_message(e)}")
            return Outcome(error=e)
        logger.info(f"Submitted transaction {tx_id}")
        return Outcome(value=tx_id)

    async def evaluate(self, tx: Union[bytes, Any]) -> Outcome[EvaluationResult]:
        """
        Evaluate script execution units without submitting.

        A failed Outcome means no evaluation was obtained. Script failures are a
        successful Outcome whose result has `failures` populated.
        """
        try:
            evaluated = await self.client.evaluate_transaction(_encoded(tx))
            result = evaluation_from_response(evaluated)
        except ApiError as e:
            if e.structured:
                logger.error(f"Evaluation rejected by indexer: {e.message}")
            else:
                logger.error(f"Evaluation failed with status {e.status_code}: {e}")
            return Outcome(error=e)
        except IndexerError as e:
            logger.error(f"Evaluation could not be obtained: {e}")
            return Outcome(error=e)

        if not result.succeeded:
            for tag, failures in result.failures.items():
                for failure in failures:
                    logger.info(f"Script failure {tag}: {failure.error}")
        return Outcome(value=result)
