"""Pydantic models for Blockfrost API responses."""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AssetAmount(BaseModel):
    """One entry of a UTxO amount list."""

    unit: str
    quantity: str


class AddressUtxo(BaseModel):
    """Entry of /addresses/{address}/utxos[/{asset}]."""

    address: str
    tx_hash: str
    output_index: int
    amount: List[AssetAmount]
    block: Optional[str] = None
    data_hash: Optional[str] = None
    inline_datum: Optional[str] = None
    reference_script_hash: Optional[str] = None


class EpochParameters(BaseModel):
    """Subset of /epochs/latest/parameters used for fee and min-UTxO calculation."""

    epoch: int
    min_fee_a: int
    min_fee_b: int
    coins_per_utxo_word: Optional[str] = None
    coins_per_utxo_size: Optional[str] = None
    price_mem: Optional[Decimal] = None
    price_step: Optional[Decimal] = None
    max_tx_ex_mem: Optional[str] = None
    max_tx_ex_steps: Optional[str] = None

    @field_validator("price_mem", "price_step", mode="before")
    @classmethod
    def _float_to_decimal(cls, value: Any) -> Any:
        # JSON floats go through str so 0.0577 stays 0.0577
        return Decimal(str(value)) if isinstance(value, float) else value


class BlockContent(BaseModel):
    """Subset of /blocks/latest."""

    hash: str
    time: int
    height: Optional[int] = None
    slot: Optional[int] = None
    epoch: Optional[int] = None


class EvaluationExUnits(BaseModel):
    memory: int
    steps: int


class ValidatorFailure(BaseModel):
    error: Optional[str] = ""
    traces: Optional[List[str]] = Field(default_factory=list)


class ScriptFailureEntry(BaseModel):
    """One failure reported for a redeemer; anything but validatorFailed lands in model_extra."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    validator_failed: Optional[ValidatorFailure] = Field(None, alias="validatorFailed")


class EvaluationFailureBody(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    script_failures: Optional[Dict[str, List[ScriptFailureEntry]]] = Field(None, alias="ScriptFailures")


class EvaluationBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    evaluation_result: Optional[Dict[str, EvaluationExUnits]] = Field(None, alias="EvaluationResult")
    evaluation_failure: Optional[EvaluationFailureBody] = Field(None, alias="EvaluationFailure")


class EvaluatedTransaction(BaseModel):
    """Ogmios-style envelope returned by /utils/txs/evaluate."""

    type: Optional[str] = None
    version: Optional[str] = None
    servicename: Optional[str] = None
    methodname: Optional[str] = None
    result: Optional[EvaluationBody] = None
    fault: Optional[Dict[str, Any]] = None
