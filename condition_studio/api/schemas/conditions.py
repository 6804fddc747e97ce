"""Pydantic schemas for condition compile and validate API requests/responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from condition_studio.api.schemas.blocks import check_block_tree_limits
from condition_studio.blocks.models import Block


class CompileRequest(BaseModel):
    """Every block on the workspace; top-level blocks are found by the compiler."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    blocks: list[Block] = Field(default_factory=list)
    strict: bool | None = Field(
        default=None, description="Override COMPILER_STRICT_MODE for this request"
    )

    @field_validator("blocks", mode="before")
    @classmethod
    def validate_blocks(cls, v: Any) -> Any:
        return check_block_tree_limits(v)


class CompileResponse(BaseModel):
    """Compiled condition with its display JSON and canonical fingerprint."""

    model_config = ConfigDict(populate_by_name=True)

    condition: dict[str, Any] | None = None
    condition_json: str = Field(default="", alias="json")
    fingerprint: str | None = None


class ValidateRequest(BaseModel):
    condition: dict[str, Any]


class ValidateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    fingerprint: str
    condition_type: str = Field(alias="conditionType")
    leaf_count: int = Field(alias="leafCount")
