"""
Condition Document Validation.

Validates that a condition document is structurally correct before it is
handed to the encryption collaborator:
- Every node has a known conditionType
- Compound nodes use a known operator and a legal operand count
- Chains are in the supported set
- Fixed methods and parameters of time and rpc nodes are untouched
- Contract nodes carry an address, a method and a well-formed return value test

Only syntactic well-formedness is checked; nothing is read from a chain.
"""

import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from condition_studio.compiler.ast import (
    BALANCE_METHOD,
    RPC_BALANCE_PARAMETERS,
    TIME_METHOD,
    Condition,
    condition_adapter,
)
from condition_studio.compiler.chains import is_valid_chain_id
from condition_studio.core.errors import ValidationError
from condition_studio.domain.enums import (
    VALID_CHAIN_IDS,
    Comparator,
    ConditionType,
    LogicalOperator,
    StandardContractType,
)


CONTRACT_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

_COMPARATORS = {c.value for c in Comparator}
_OPERATORS = {o.value for o in LogicalOperator}
_STANDARD_TYPES = {s.value for s in StandardContractType}


def validate_condition_document(document: Any) -> None:
    """
    Validate a condition document.

    This is the main entry point for document validation. It performs
    recursive checks on structure, chains, methods and return value tests.

    Args:
        document: The condition document (plain JSON-compatible dict)

    Raises:
        ValidationError: If any validation check fails, with the JSONPath of
            the offending node in details["path"]

    Example:
        >>> doc = {
        ...     "conditionType": "time",
        ...     "chain": 11155111,
        ...     "method": "blocktime",
        ...     "returnValueTest": {"comparator": ">=", "value": 1700000000},
        ... }
        >>> validate_condition_document(doc)  # Passes
        >>> validate_condition_document({**doc, "chain": 5})  # Raises ValidationError
    """
    if not document:
        raise ValidationError("Condition document cannot be empty", details={"document": document})

    _validate_node(document, path="$")


def parse_condition_document(document: Any) -> Condition:
    """
    Validate a condition document and return its typed AST.

    Raises:
        ValidationError: If the document is malformed
    """
    validate_condition_document(document)
    try:
        return condition_adapter.validate_python(document)
    except PydanticValidationError as e:
        raise ValidationError(
            "Condition document does not match the condition schema",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def _validate_node(node: Any, path: str) -> None:
    """
    Recursively validate a document node.

    Args:
        node: Current node being validated
        path: JSONPath to current node (for error reporting)

    Raises:
        ValidationError: If validation fails at this node
    """
    if not isinstance(node, dict):
        raise ValidationError(
            f"Condition node must be a dictionary at {path}",
            details={"path": path, "type": type(node).__name__},
        )

    condition_type = node.get("conditionType")

    if condition_type == ConditionType.COMPOUND.value:
        _validate_compound_node(node, path)
    elif condition_type == ConditionType.TIME.value:
        _validate_chain(node, path)
        _validate_fixed_method(node, TIME_METHOD, path)
        _validate_return_value_test(node.get("returnValueTest"), path)
    elif condition_type == ConditionType.RPC.value:
        _validate_chain(node, path)
        _validate_fixed_method(node, BALANCE_METHOD, path)
        if node.get("parameters") != list(RPC_BALANCE_PARAMETERS):
            raise ValidationError(
                f"RPC balance condition must use parameters "
                f"{list(RPC_BALANCE_PARAMETERS)} at {path}",
                details={"path": path, "parameters": node.get("parameters")},
            )
        _validate_return_value_test(node.get("returnValueTest"), path)
    elif condition_type == ConditionType.CONTRACT.value:
        _validate_contract_node(node, path)
    else:
        raise ValidationError(
            f"Invalid conditionType at {path}: must be one of "
            "'time', 'rpc', 'contract' or 'compound'",
            details={"path": path, "conditionType": condition_type},
        )


def _validate_compound_node(node: dict, path: str) -> None:
    """
    Validate a compound node and its operands.

    'and' / 'or' need at least one operand, 'not' exactly one.
    """
    operator = node.get("operator")
    if operator not in _OPERATORS:
        raise ValidationError(
            f"Invalid compound operator '{operator}' at {path}",
            details={"path": path, "operator": operator, "allowed": sorted(_OPERATORS)},
        )

    operands = node.get("operands")
    if not isinstance(operands, list):
        raise ValidationError(
            f"'operands' must be a list at {path}",
            details={"path": path, "type": type(operands).__name__},
        )

    if len(operands) == 0:
        raise ValidationError(f"'operands' cannot be empty at {path}", details={"path": path})

    if operator == LogicalOperator.NOT.value and len(operands) != 1:
        raise ValidationError(
            f"'not' must have exactly one operand at {path}",
            details={"path": path, "operand_count": len(operands)},
        )

    for i, operand in enumerate(operands):
        _validate_node(operand, f"{path}.operands[{i}]")


def _validate_contract_node(node: dict, path: str) -> None:
    """
    Validate a contract call node.

    Checks:
    1. Chain is supported
    2. contractAddress is a 0x-prefixed 20-byte hex address
    3. method is a non-empty string
    4. parameters is a list
    5. standardContractType, if present, is a known standard
    6. returnValueTest is well-formed
    """
    _validate_chain(node, path)

    address = node.get("contractAddress")
    if not isinstance(address, str) or not CONTRACT_ADDRESS_PATTERN.match(address):
        raise ValidationError(
            f"Contract condition needs a 0x-prefixed 40 hex digit contractAddress at {path}",
            details={"path": path, "contractAddress": address},
        )

    method = node.get("method")
    if not isinstance(method, str) or not method.strip():
        raise ValidationError(
            f"Contract condition missing 'method' at {path}",
            details={"path": path, "method": method},
        )

    if not isinstance(node.get("parameters"), list):
        raise ValidationError(
            f"'parameters' must be a list at {path}",
            details={"path": path, "type": type(node.get("parameters")).__name__},
        )

    standard = node.get("standardContractType")
    if standard is not None and standard not in _STANDARD_TYPES:
        raise ValidationError(
            f"Unknown standardContractType '{standard}' at {path}",
            details={"path": path, "allowed": sorted(_STANDARD_TYPES)},
        )

    function_abi = node.get("functionAbi")
    if function_abi is not None and not isinstance(function_abi, dict):
        raise ValidationError(
            f"'functionAbi' must be an object at {path}",
            details={"path": path, "type": type(function_abi).__name__},
        )

    _validate_return_value_test(node.get("returnValueTest"), path)


def _validate_chain(node: dict, path: str) -> None:
    chain = node.get("chain")
    if not is_valid_chain_id(chain):
        raise ValidationError(
            f"Invalid chain at {path}. Must be one of: "
            f"{', '.join(str(c) for c in VALID_CHAIN_IDS)}",
            details={"path": path, "chain": chain, "valid_chains": list(VALID_CHAIN_IDS)},
        )


def _validate_fixed_method(node: dict, expected: str, path: str) -> None:
    if node.get("method") != expected:
        raise ValidationError(
            f"Method must be '{expected}' at {path}",
            details={"path": path, "method": node.get("method"), "expected": expected},
        )


def _validate_return_value_test(test: Any, path: str) -> None:
    """
    Validate a return value test.

    Args:
        test: The returnValueTest object
        path: JSONPath of the owning node

    Raises:
        ValidationError: If the comparator or value is missing or invalid
    """
    test_path = f"{path}.returnValueTest"
    if not isinstance(test, dict):
        raise ValidationError(
            f"'returnValueTest' must be an object at {test_path}",
            details={"path": test_path, "type": type(test).__name__},
        )

    comparator = test.get("comparator")
    if comparator not in _COMPARATORS:
        raise ValidationError(
            f"Invalid comparator '{comparator}' at {test_path}",
            details={"path": test_path, "comparator": comparator, "allowed": sorted(_COMPARATORS)},
        )

    if test.get("value") is None:
        raise ValidationError(
            f"'returnValueTest' missing 'value' at {test_path}",
            details={"path": test_path},
        )
