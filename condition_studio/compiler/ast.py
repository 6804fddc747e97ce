"""
Condition AST.

Typed form of the condition document handed to the threshold-decryption
network. Four node kinds, discriminated by `conditionType`. Field order is
the document's key order, so model_dump() output can be displayed as is.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel

from condition_studio.domain.enums import (
    ChainId,
    Comparator,
    LogicalOperator,
    StandardContractType,
)

USER_ADDRESS = ":userAddress"
TIME_METHOD = "blocktime"
BALANCE_METHOD = "eth_getBalance"
RPC_BALANCE_PARAMETERS = (USER_ADDRESS, "latest")


class _ConditionModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def to_document(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys; unset optional fields are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ReturnValueTest(_ConditionModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    comparator: Comparator
    value: Any

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("returnValueTest.value is required")
        return v


class TimeCondition(_ConditionModel):
    condition_type: Literal["time"] = "time"
    chain: ChainId
    method: Literal["blocktime"] = TIME_METHOD
    return_value_test: ReturnValueTest


class RpcCondition(_ConditionModel):
    condition_type: Literal["rpc"] = "rpc"
    chain: ChainId
    method: Literal["eth_getBalance"] = BALANCE_METHOD
    parameters: list[Any] = Field(default_factory=lambda: list(RPC_BALANCE_PARAMETERS))
    return_value_test: ReturnValueTest

    @field_validator("parameters")
    @classmethod
    def validate_parameters(cls, v: list[Any]) -> list[Any]:
        """Balance checks always read the requester's latest balance."""
        if list(v) != list(RPC_BALANCE_PARAMETERS):
            raise ValueError(f"eth_getBalance parameters must be {list(RPC_BALANCE_PARAMETERS)}")
        return v


class ContractCondition(_ConditionModel):
    condition_type: Literal["contract"] = "contract"
    chain: ChainId
    contract_address: str
    method: str
    parameters: list[Any] = Field(default_factory=lambda: [USER_ADDRESS])
    standard_contract_type: StandardContractType | None = None
    function_abi: dict[str, Any] | None = None
    return_value_test: ReturnValueTest

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("contract method cannot be empty")
        return v


class CompoundCondition(_ConditionModel):
    condition_type: Literal["compound"] = "compound"
    operator: LogicalOperator
    operands: list[Condition] = Field(min_length=1)

    @model_validator(mode="after")
    def validate_operand_count(self) -> CompoundCondition:
        if self.operator == LogicalOperator.NOT and len(self.operands) != 1:
            raise ValueError("'not' takes exactly one operand")
        return self


Condition = Annotated[
    TimeCondition | RpcCondition | ContractCondition | CompoundCondition,
    Field(discriminator="condition_type"),
]

CompoundCondition.model_rebuild()

condition_adapter: TypeAdapter[Condition] = TypeAdapter(Condition)


def leaf_count(condition: Condition) -> int:
    """Number of non-compound conditions in the tree."""
    if isinstance(condition, CompoundCondition):
        return sum(leaf_count(operand) for operand in condition.operands)
    return 1
