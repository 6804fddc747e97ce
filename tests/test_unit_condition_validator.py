import pytest

from condition_studio.compiler.ast import CompoundCondition, ContractCondition
from condition_studio.compiler.validator import (
    parse_condition_document,
    validate_condition_document,
)
from condition_studio.core.errors import ValidationError

ADDRESS = "0x" + "0a" * 20


def time_doc(**overrides):
    return {
        "conditionType": "time",
        "chain": 11155111,
        "method": "blocktime",
        "returnValueTest": {"comparator": ">=", "value": 1700000000},
        **overrides,
    }


def rpc_doc(**overrides):
    return {
        "conditionType": "rpc",
        "chain": 137,
        "method": "eth_getBalance",
        "parameters": [":userAddress", "latest"],
        "returnValueTest": {"comparator": ">=", "value": 0},
        **overrides,
    }


def contract_doc(**overrides):
    return {
        "conditionType": "contract",
        "chain": 1,
        "contractAddress": ADDRESS,
        "method": "balanceOf",
        "parameters": [":userAddress"],
        "standardContractType": "ERC20",
        "returnValueTest": {"comparator": ">", "value": 0},
        **overrides,
    }


@pytest.mark.anyio
async def test_valid_documents_pass():
    validate_condition_document(time_doc())
    validate_condition_document(rpc_doc())
    validate_condition_document(contract_doc())
    validate_condition_document(
        {"conditionType": "compound", "operator": "or", "operands": [time_doc(), rpc_doc()]}
    )


@pytest.mark.anyio
async def test_empty_document_raises():
    with pytest.raises(ValidationError):
        validate_condition_document({})


@pytest.mark.anyio
async def test_non_dict_node_raises():
    with pytest.raises(ValidationError) as exc_info:
        validate_condition_document(
            {"conditionType": "compound", "operator": "and", "operands": ["time"]}
        )

    assert exc_info.value.details["path"] == "$.operands[0]"


@pytest.mark.anyio
async def test_unknown_condition_type_raises():
    with pytest.raises(ValidationError):
        validate_condition_document(time_doc(conditionType="json-rpc"))


@pytest.mark.anyio
async def test_compound_rules():
    with pytest.raises(ValidationError):
        validate_condition_document(
            {"conditionType": "compound", "operator": "xor", "operands": [time_doc()]}
        )

    with pytest.raises(ValidationError):
        validate_condition_document(
            {"conditionType": "compound", "operator": "and", "operands": []}
        )

    with pytest.raises(ValidationError):
        validate_condition_document(
            {"conditionType": "compound", "operator": "and", "operands": {}}
        )

    with pytest.raises(ValidationError) as exc_info:
        validate_condition_document(
            {"conditionType": "compound", "operator": "not", "operands": [time_doc(), rpc_doc()]}
        )
    assert exc_info.value.details["operand_count"] == 2


@pytest.mark.anyio
async def test_nested_error_reports_path():
    doc = {
        "conditionType": "compound",
        "operator": "and",
        "operands": [
            time_doc(),
            {"conditionType": "compound", "operator": "not", "operands": [time_doc(chain=5)]},
        ],
    }

    with pytest.raises(ValidationError) as exc_info:
        validate_condition_document(doc)

    assert exc_info.value.details["path"] == "$.operands[1].operands[0]"
    assert exc_info.value.details["chain"] == 5


@pytest.mark.anyio
async def test_fixed_methods_and_parameters():
    with pytest.raises(ValidationError):
        validate_condition_document(time_doc(method="timestamp"))

    with pytest.raises(ValidationError):
        validate_condition_document(rpc_doc(method="eth_call"))

    with pytest.raises(ValidationError):
        validate_condition_document(rpc_doc(parameters=[":userAddress", "earliest"]))


@pytest.mark.anyio
@pytest.mark.parametrize(
    "overrides",
    [
        {"contractAddress": "0xABC"},
        {"contractAddress": ""},
        {"method": "  "},
        {"parameters": ":userAddress"},
        {"standardContractType": "ERC4626"},
        {"functionAbi": "[]"},
    ],
)
async def test_contract_rules(overrides):
    with pytest.raises(ValidationError):
        validate_condition_document(contract_doc(**overrides))


@pytest.mark.anyio
async def test_return_value_test_rules():
    with pytest.raises(ValidationError) as exc_info:
        validate_condition_document(time_doc(returnValueTest={"comparator": "~", "value": 1}))
    assert exc_info.value.details["path"] == "$.returnValueTest"

    with pytest.raises(ValidationError):
        validate_condition_document(time_doc(returnValueTest={"comparator": ">="}))

    with pytest.raises(ValidationError):
        validate_condition_document(time_doc(returnValueTest=None))


@pytest.mark.anyio
async def test_not_equal_is_accepted_in_documents():
    validate_condition_document(contract_doc(returnValueTest={"comparator": "!=", "value": 0}))


@pytest.mark.anyio
async def test_parse_returns_typed_ast():
    condition = parse_condition_document(
        {"conditionType": "compound", "operator": "and", "operands": [contract_doc()]}
    )

    assert isinstance(condition, CompoundCondition)
    assert isinstance(condition.operands[0], ContractCondition)
    assert condition.operands[0].contract_address == ADDRESS


@pytest.mark.anyio
async def test_parse_rejects_unknown_fields():
    with pytest.raises(ValidationError) as exc_info:
        parse_condition_document(time_doc(extra="field"))

    assert exc_info.value.details["errors"]
