"""API routes for condition compilation and validation."""

from __future__ import annotations

from fastapi import APIRouter

from condition_studio.api.schemas.conditions import (
    CompileRequest,
    CompileResponse,
    ValidateRequest,
    ValidateResponse,
)
from condition_studio.compiler.ast import leaf_count
from condition_studio.compiler.canonicalizer import condition_fingerprint, to_condition_json
from condition_studio.compiler.compiler import compile_blocks
from condition_studio.compiler.validator import parse_condition_document

router = APIRouter(prefix="/conditions", tags=["conditions"])


@router.post("/compile")
async def compile_conditions(payload: CompileRequest) -> CompileResponse:
    """Compile workspace blocks into a condition document.

    Returns condition None and an empty json string when nothing compiles.
    An invalid entered chain id is a 400; strict-mode failures are a 422.
    """
    condition = compile_blocks(payload.blocks, strict=payload.strict)
    if condition is None:
        return CompileResponse()

    return CompileResponse(
        condition=condition.to_document(),
        condition_json=to_condition_json(condition),
        fingerprint=condition_fingerprint(condition),
    )


@router.post("/validate")
async def validate_condition(payload: ValidateRequest) -> ValidateResponse:
    """Check a condition document before it is used for encryption."""
    condition = parse_condition_document(payload.condition)
    return ValidateResponse(
        valid=True,
        fingerprint=condition_fingerprint(condition),
        condition_type=condition.condition_type,
        leaf_count=leaf_count(condition),
    )
