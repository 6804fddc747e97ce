"""
Block Tree Compiler for Condition Studio.

Compiles the user's block composition into a typed condition AST that is
handed, unmodified, to the threshold-decryption network.

Guarantees:
- Total: every tree compiles to a condition or to None ("absent")
- Deterministic: the same tree always yields a structurally equal condition
- Honest: a chain the user entered is never silently replaced

Structural gaps (an operator with nothing connected, a contract block without
a method) degrade the affected subtree to absent and the compound ancestor
drops that operand. In strict mode the same gaps raise CompilationError and
the final document is run through the document validator.
"""

import json
import logging
import time
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from condition_studio.blocks.models import (
    PARAM_SLOT_PATTERN,
    Block,
    BlockInput,
    find_top_level_blocks,
)
from condition_studio.compiler.ast import (
    BALANCE_METHOD,
    USER_ADDRESS,
    CompoundCondition,
    Condition,
    ContractCondition,
    ReturnValueTest,
    RpcCondition,
    TimeCondition,
    leaf_count,
)
from condition_studio.compiler.chains import parse_integer_literal, resolve_chain
from condition_studio.compiler.validator import validate_condition_document
from condition_studio.core.config import settings
from condition_studio.core.errors import CompilationError, ValidationError
from condition_studio.core.observability import metrics
from condition_studio.domain.enums import BlockKind, Comparator, ConditionType, LogicalOperator

logger = logging.getLogger(__name__)

TOKEN_ID_PLACEHOLDER = ":tokenId"

# Return value test used by contract blocks that configure none
DEFAULT_CONTRACT_TEST = {"comparator": Comparator.GT.value, "value": 0}


def compile_blocks(blocks: Block | Iterable[Block], strict: bool | None = None) -> Condition | None:
    """
    Compile a block composition into a condition.

    This is the main entry point for compilation. It:
    1. Selects the top-level condition/operator blocks
    2. Compiles each of them recursively
    3. Combines several top-level results under an implicit 'and'
    4. In strict mode, validates the final document

    Args:
        blocks: A root block, or every block on the workspace
        strict: Raise instead of dropping incomplete conditions
                (defaults to settings.compiler_strict_mode)

    Returns:
        The compiled condition, or None when nothing compiles

    Raises:
        ChainValidationError: If an entered chain id is not supported
        CompilationError: In strict mode, if a condition cannot be compiled

    Example:
        >>> compile_blocks([]) is None
        True
    """
    if strict is None:
        strict = settings.compiler_strict_mode

    start_time = time.time()
    try:
        condition = _compile_workspace(_as_block_list(blocks), strict)
        if strict and condition is not None:
            _validate_compiled(condition)
    except Exception:
        _record_compiler_metrics("error", time.time() - start_time, 0)
        raise

    duration = time.time() - start_time
    if condition is None:
        logger.debug("Block tree compiled to no condition")
        _record_compiler_metrics("absent", duration, 0)
    else:
        leaves = leaf_count(condition)
        logger.debug(
            "Compiled %s condition with %d leaf condition(s) in %.4fs",
            condition.condition_type,
            leaves,
            duration,
        )
        _record_compiler_metrics("success", duration, leaves)
    return condition


def compile_to_document(
    blocks: Block | Iterable[Block], strict: bool | None = None
) -> dict[str, Any] | None:
    """Compile and return the plain JSON document, or None when absent."""
    condition = compile_blocks(blocks, strict=strict)
    return condition.to_document() if condition is not None else None


def _record_compiler_metrics(status: str, duration: float, leaves: int) -> None:
    metrics.compiler_compilations_total.labels(status=status).inc()
    metrics.compiler_duration_seconds.observe(duration)
    if status == "success":
        metrics.compiler_leaf_conditions.observe(leaves)


def _as_block_list(blocks: Block | Iterable[Block]) -> list[Block]:
    if isinstance(blocks, Block):
        return [blocks]
    return list(blocks)


def _validate_compiled(condition: Condition) -> None:
    try:
        validate_condition_document(condition.to_document())
    except ValidationError as e:
        raise CompilationError(
            f"Compiled condition is invalid: {e.message}", details=e.details
        ) from e


def _compile_workspace(blocks: list[Block], strict: bool) -> Condition | None:
    """Compile the top-level blocks, and-ing them when there is more than one."""
    roots = [
        block
        for block in find_top_level_blocks(blocks)
        if block.kind in (BlockKind.CONDITION, BlockKind.OPERATOR)
    ]
    if not roots:
        return None
    if len(roots) == 1:
        return _compile_block(roots[0], strict)

    operands = [c for c in (_compile_block(root, strict) for root in roots) if c is not None]
    if not operands:
        return None
    if len(operands) == 1:
        return operands[0]
    return CompoundCondition(operator=LogicalOperator.AND, operands=operands)


def _compile_block(block: Block, strict: bool) -> Condition | None:
    """
    Compile one block and everything connected below it.

    Leaf failures are raised as CompilationError by the builders; outside
    strict mode they are logged and the block compiles to None.
    """
    if block.kind == BlockKind.OPERATOR:
        return _compile_operator(block, strict)
    if block.kind != BlockKind.CONDITION:
        logger.debug("Skipping %s block %s", block.kind.value, block.id)
        return None

    try:
        return _compile_condition(block)
    except CompilationError as e:
        if strict:
            raise
        logger.warning(
            "Dropping condition block %s: %s",
            block.id,
            e.message,
            extra={"block_id": block.id, "details": e.details},
        )
        return None


def _compile_operator(block: Block, strict: bool) -> Condition | None:
    operands = []
    for block_input in block.connected_inputs():
        operand = _compile_block(block_input.connected, strict)
        if operand is not None:
            operands.append(operand)

    if not operands:
        logger.debug("Operator %s has no compilable operands", block.id)
        return None

    raw_operator = block.properties.get("operator") or LogicalOperator.AND.value
    try:
        return CompoundCondition(operator=raw_operator, operands=operands)
    except PydanticValidationError as e:
        error = CompilationError(
            f"Operator block '{block.id}' cannot be compiled",
            details={"block_id": block.id, "operator": raw_operator, "errors": _errors(e)},
        )
        if strict:
            raise error from e
        logger.warning("Dropping operator block %s: %s", block.id, error.message)
        return None


def _compile_condition(block: Block) -> Condition:
    condition_type = block.properties.get("conditionType")
    method = block.properties.get("method")
    if condition_type is None and method == BALANCE_METHOD:
        condition_type = ConditionType.RPC.value

    if condition_type == ConditionType.TIME.value:
        builder = _build_time
    elif condition_type == ConditionType.RPC.value:
        builder = _build_rpc
    elif condition_type == ConditionType.CONTRACT.value:
        builder = _build_contract
    else:
        raise CompilationError(
            f"Unsupported conditionType '{condition_type}' on block '{block.id}'",
            details={"block_id": block.id, "conditionType": condition_type},
        )

    try:
        return builder(block)
    except PydanticValidationError as e:
        raise CompilationError(
            f"Condition block '{block.id}' does not form a valid {condition_type} condition",
            details={"block_id": block.id, "errors": _errors(e)},
        ) from e


# ============================================================================
# Leaf builders
# ============================================================================


def _build_time(block: Block) -> TimeCondition:
    chain = resolve_chain(_literal(block, "chain"))
    slot_id = "minTimestamp" if block.find_input("minTimestamp") is not None else "timestamp"
    test = _numeric_test(block, slot_id, Comparator.GTE) or ReturnValueTest(
        comparator=Comparator.GTE, value=0
    )
    return TimeCondition(chain=chain, return_value_test=test)


def _build_rpc(block: Block) -> RpcCondition:
    method = block.properties.get("method") or BALANCE_METHOD
    if method != BALANCE_METHOD:
        raise CompilationError(
            f"Unsupported rpc method '{method}' on block '{block.id}'",
            details={"block_id": block.id, "method": method, "supported": [BALANCE_METHOD]},
        )

    chain = resolve_chain(_literal(block, "chain"))
    test = _numeric_test(block, "minBalance", Comparator.GTE) or ReturnValueTest(
        comparator=Comparator.GTE, value=0
    )
    return RpcCondition(chain=chain, return_value_test=test)


def _build_contract(block: Block) -> ContractCondition:
    chain = resolve_chain(_literal(block, "chain"))

    method = _literal(block, "method")
    if method is None:
        method = block.properties.get("method")
    if not isinstance(method, str) or not method.strip():
        raise CompilationError(
            f"Contract block '{block.id}' has no method",
            details={"block_id": block.id},
        )

    address = _literal(block, "contractAddress")
    fields: dict[str, Any] = {
        "chain": chain,
        "contract_address": str(address).strip() if address is not None else "",
        "method": method.strip(),
        "parameters": _contract_parameters(block),
        "return_value_test": _contract_test(block),
    }

    standard = block.properties.get("standardContractType")
    if standard:
        fields["standard_contract_type"] = standard

    function_abi = _function_abi(block)
    if function_abi is not None:
        fields["function_abi"] = function_abi

    return ContractCondition(**fields)


def _contract_parameters(block: Block) -> list[Any]:
    """
    Resolve the contract call parameters.

    Precedence: JSON 'parameters' slot, filled param_N slots, the template's
    parameters, then [":userAddress"]. A tokenId slot fills the ":tokenId"
    placeholder wherever it appears.
    """
    parameters = None

    raw = _literal(block, "parameters")
    if raw is not None:
        parsed = _parse_json(block, "parameters", raw)
        if isinstance(parsed, list):
            parameters = parsed
        elif parsed is not None:
            logger.warning(
                "Ignoring non-list parameters on block %s", block.id, extra={"block_id": block.id}
            )

    if parameters is None:
        indexed = []
        for block_input in block.inputs:
            match = PARAM_SLOT_PATTERN.match(block_input.id)
            literal = _input_literal(block_input)
            if match and literal is not None:
                indexed.append((int(match.group(1)), literal))
        if indexed:
            parameters = [literal for _, literal in sorted(indexed, key=lambda item: item[0])]

    if parameters is None:
        configured = block.properties.get("parameters")
        parameters = list(configured) if isinstance(configured, list) else [USER_ADDRESS]

    token_id = _literal(block, "tokenId")
    if token_id is not None:
        token_value = _parse_int(block, "tokenId", token_id)
        parameters = [token_value if p == TOKEN_ID_PLACEHOLDER else p for p in parameters]

    return parameters


def _contract_test(block: Block) -> ReturnValueTest:
    test = _numeric_test(block, "tokenAmount", Comparator.GTE)
    if test is not None:
        return test

    expected = _literal(block, "expectedValue")
    if expected is not None:
        slot = block.find_input("expectedValue")
        return ReturnValueTest(
            comparator=slot.comparator or Comparator.EQ, value=_integer_or_literal(expected)
        )

    configured = block.properties.get("returnValueTest")
    if isinstance(configured, dict):
        return ReturnValueTest.model_validate(configured)

    return ReturnValueTest.model_validate(DEFAULT_CONTRACT_TEST)


def _function_abi(block: Block) -> dict[str, Any] | None:
    raw = _literal(block, "functionAbi")
    if raw is None:
        configured = block.properties.get("functionAbi")
        return configured if isinstance(configured, dict) else None

    parsed = _parse_json(block, "functionAbi", raw)
    if parsed is not None and not isinstance(parsed, dict):
        logger.warning(
            "Ignoring functionAbi on block %s: not a JSON object",
            block.id,
            extra={"block_id": block.id},
        )
        return None
    return parsed


# ============================================================================
# Slot helpers
# ============================================================================


def _input_literal(block_input: BlockInput) -> str | int | float | None:
    """
    The literal entered in a slot.

    The slot's own value wins; otherwise a connected value block's value is
    used. Blank strings count as nothing entered, "0" does not.
    """
    for candidate in (
        block_input.value,
        block_input.connected.value if block_input.connected is not None else None,
    ):
        if candidate is None or isinstance(candidate, bool):
            continue
        if isinstance(candidate, str) and not candidate.strip():
            continue
        return candidate
    return None


def _literal(block: Block, slot_id: str) -> str | int | float | None:
    block_input = block.find_input(slot_id)
    return _input_literal(block_input) if block_input is not None else None


def _numeric_test(block: Block, slot_id: str, default: Comparator) -> ReturnValueTest | None:
    """Build {comparator, int(value)} from a numeric slot, or None if the slot is empty."""
    raw = _literal(block, slot_id)
    if raw is None:
        return None
    slot = block.find_input(slot_id)
    return ReturnValueTest(
        comparator=slot.comparator or default, value=_parse_int(block, slot_id, raw)
    )


def _parse_int(block: Block, slot_id: str, raw: str | int | float) -> int:
    """
    Parse an integer slot value.

    Raises:
        CompilationError: If the value is not an integer
    """
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        parsed = parse_integer_literal(raw)
        if parsed is not None:
            return parsed
    raise CompilationError(
        f"Slot '{slot_id}' on block '{block.id}' is not an integer: {raw!r}",
        details={"block_id": block.id, "slot_id": slot_id, "value": str(raw)},
    )


def _integer_or_literal(raw: str | int | float) -> str | int | float:
    if isinstance(raw, str):
        parsed = parse_integer_literal(raw)
        return parsed if parsed is not None else raw.strip()
    return raw


def _parse_json(block: Block, slot_id: str, raw: str | int | float) -> Any:
    """Parse a JSON slot value. Malformed JSON is logged and yields None."""
    try:
        return json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as e:
        logger.warning(
            "Failed to parse %s on block %s: %s",
            slot_id,
            block.id,
            e.msg,
            extra={"block_id": block.id, "slot_id": slot_id},
        )
        return None


def _errors(error: PydanticValidationError) -> list[dict[str, Any]]:
    return error.errors(include_url=False, include_context=False, include_input=False)
