import json

import pytest

from condition_studio.compiler.ast import ReturnValueTest, TimeCondition
from condition_studio.compiler.canonicalizer import (
    canonicalize_json,
    condition_fingerprint,
    to_canonical_json_string,
    to_condition_json,
)
from condition_studio.domain.enums import ChainId


def time_condition() -> TimeCondition:
    return TimeCondition(
        chain=ChainId.SEPOLIA,
        return_value_test=ReturnValueTest(comparator=">=", value=1700000000),
    )


@pytest.mark.anyio
async def test_canonicalize_sorts_nested_keys_and_keeps_list_order():
    result = canonicalize_json({"z": 1, "a": {"c": 2, "b": 3}, "m": [{"y": 1, "x": 2}, 0]})

    assert list(result) == ["a", "m", "z"]
    assert list(result["a"]) == ["b", "c"]
    assert list(result["m"][0]) == ["x", "y"]
    assert result["m"][1] == 0


@pytest.mark.anyio
async def test_display_json_keeps_construction_order():
    text = to_condition_json(time_condition())

    assert list(json.loads(text)) == ["conditionType", "chain", "method", "returnValueTest"]
    assert text.startswith('{\n  "conditionType": "time",\n  "chain": 11155111,')


@pytest.mark.anyio
async def test_display_json_of_absent_condition_is_empty():
    assert to_condition_json(None) == ""


@pytest.mark.anyio
async def test_canonical_string_is_compact_and_sorted():
    text = to_canonical_json_string(time_condition())

    assert text == (
        '{"chain":11155111,"conditionType":"time","method":"blocktime",'
        '"returnValueTest":{"comparator":">=","value":1700000000}}'
    )


@pytest.mark.anyio
async def test_fingerprint_ignores_key_order():
    doc = time_condition().to_document()
    reordered = dict(reversed(list(doc.items())))

    assert condition_fingerprint(doc) == condition_fingerprint(reordered)
    assert condition_fingerprint(doc) == condition_fingerprint(time_condition())
    assert len(condition_fingerprint(doc)) == 64
