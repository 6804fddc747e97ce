from unittest.mock import patch

import pytest

from condition_studio.compiler.chains import is_valid_chain_id, resolve_chain
from condition_studio.core.config import settings
from condition_studio.core.errors import ChainValidationError, ValidationError
from condition_studio.domain.enums import ChainId


@pytest.mark.anyio
@pytest.mark.parametrize(
    "raw,expected",
    [
        ("1", ChainId.ETHEREUM_MAINNET),
        ("137", ChainId.POLYGON),
        (" 80002 ", ChainId.POLYGON_AMOY),
        (11155111, ChainId.SEPOLIA),
        (137.0, ChainId.POLYGON),
    ],
)
async def test_resolve_supported_chain(raw, expected):
    assert resolve_chain(raw) is expected


@pytest.mark.anyio
@pytest.mark.parametrize("raw", [None, "", "   "])
async def test_nothing_entered_uses_default(raw):
    assert resolve_chain(raw) is ChainId.SEPOLIA
    assert resolve_chain(raw, default=ChainId.POLYGON) is ChainId.POLYGON


@pytest.mark.anyio
async def test_default_comes_from_settings():
    with patch.object(settings, "compiler_default_chain_id", 1):
        assert resolve_chain("") is ChainId.ETHEREUM_MAINNET


@pytest.mark.anyio
@pytest.mark.parametrize(
    "raw",
    [
        "999",
        "5",
        "0x89",
        "polygon",
        "137.5",
        137.5,
        True,
        -1,
        "1_37",
        "\u0661\u0663\u0667",  # Arabic-Indic digits
        "\uff11\uff13\uff17",  # fullwidth digits
    ],
)
async def test_entered_invalid_chain_is_rejected(raw):
    with pytest.raises(ChainValidationError) as exc_info:
        resolve_chain(raw)

    assert "Must be one of: 1, 137, 80002, 11155111" in exc_info.value.message
    assert exc_info.value.details["valid_chains"] == [1, 137, 80002, 11155111]


@pytest.mark.anyio
async def test_chain_error_is_a_validation_error():
    with pytest.raises(ValidationError):
        resolve_chain("42")


@pytest.mark.anyio
async def test_is_valid_chain_id():
    assert is_valid_chain_id(137)
    assert is_valid_chain_id(ChainId.SEPOLIA)
    assert not is_valid_chain_id("137")
    assert not is_valid_chain_id(True)
    assert not is_valid_chain_id(5)
