"""
Pytest configuration and shared fixtures.

Provides:
- AnyIO backend selection for async tests
- FastAPI TestClient for the API
- Wire-format block factories for hand-built trees, as the UI sends them
"""

from __future__ import annotations

import os
from typing import Any

# Tests never read an env file; APP_ENV must be set before settings load.
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402 (import after env setup)
from fastapi.testclient import TestClient  # noqa: E402 (import after env setup)

ERC20_ADDRESS = "0x1c7d4b196cb0c7b01d743fbc6116a902379c7238"


# Per AnyIO testing docs: https://anyio.readthedocs.io/en/stable/testing.html
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def client() -> TestClient:
    """TestClient on a freshly created app."""
    from condition_studio.main import create_app

    return TestClient(create_app())


def slot(slot_id: str, value: Any = "", comparator: str | None = None, **extra: Any) -> dict:
    """Wire-format BlockInput."""
    data: dict[str, Any] = {"id": slot_id, "type": ["value"], "value": value, **extra}
    if comparator is not None:
        data["comparator"] = comparator
    return data


def time_block(
    block_id: str = "time-1",
    chain: Any = "11155111",
    timestamp: Any = "1700000000",
    comparator: str = ">=",
) -> dict:
    return {
        "id": block_id,
        "type": "condition",
        "properties": {"conditionType": "time", "method": "blocktime"},
        "inputs": [slot("chain", chain), slot("minTimestamp", timestamp, comparator)],
    }


def balance_block(
    block_id: str = "rpc-1", chain: Any = "137", min_balance: Any = "1000000000000000000"
) -> dict:
    return {
        "id": block_id,
        "type": "condition",
        "properties": {"conditionType": "rpc", "method": "eth_getBalance"},
        "inputs": [slot("chain", chain), slot("minBalance", min_balance, ">=")],
    }


def erc20_block(
    block_id: str = "erc20-1",
    chain: Any = "137",
    amount: Any = "5",
    comparator: str = ">",
    address: str = ERC20_ADDRESS,
) -> dict:
    return {
        "id": block_id,
        "type": "condition",
        "properties": {
            "conditionType": "contract",
            "method": "balanceOf",
            "standardContractType": "ERC20",
            "parameters": [":userAddress"],
        },
        "inputs": [
            slot("chain", chain),
            slot("contractAddress", address),
            slot("tokenAmount", amount, comparator),
        ],
    }


def operator_block(
    block_id: str, operator: str | None, *children: dict, max_inputs: int | None = None
) -> dict:
    """Operator with the given children connected, followed by one growth slot."""
    properties: dict[str, Any] = {}
    if operator is not None:
        properties["operator"] = operator
    if max_inputs is not None:
        properties["maxInputs"] = max_inputs
    inputs = [
        {"id": f"condition-{i}", "type": ["condition", "operator"], "connected": child}
        for i, child in enumerate(children, start=1)
    ]
    if max_inputs is None or len(children) < max_inputs:
        inputs.append({"id": f"condition-{len(children) + 1}", "type": ["condition", "operator"]})
    return {"id": block_id, "type": "operator", "properties": properties, "inputs": inputs}
