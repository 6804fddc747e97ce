import pytest

from condition_studio.blocks.catalog import TEMPLATE_CATEGORIES, get_template, list_templates
from condition_studio.blocks.models import check_invariants
from condition_studio.core.errors import NotFoundError
from condition_studio.domain.enums import BlockKind


@pytest.mark.anyio
async def test_catalog_covers_every_condition_family():
    families = {
        t.properties.get("conditionType") for t in list_templates() if t.kind == BlockKind.CONDITION
    }
    assert families == {"time", "rpc", "contract"}


@pytest.mark.anyio
async def test_catalog_operators():
    operators = {t.properties["operator"]: t for t in list_templates("operators")}

    assert set(operators) == {"and", "or", "not"}
    assert operators["not"].max_inputs == 1
    assert operators["and"].max_inputs is None


@pytest.mark.anyio
async def test_categories_in_catalog_order():
    assert TEMPLATE_CATEGORIES == ("time", "rpc", "contract", "operators", "values")


@pytest.mark.anyio
async def test_every_template_is_well_formed():
    for template in list_templates():
        assert template.is_template is True
        check_invariants(template)


@pytest.mark.anyio
async def test_filter_by_category():
    assert [t.id for t in list_templates("time")] == ["timelock"]
    assert list_templates("nope") == []


@pytest.mark.anyio
async def test_get_template_returns_independent_copy():
    first = get_template("erc20-balance")
    first.properties["method"] = "totalSupply"

    assert get_template("erc20-balance").properties["method"] == "balanceOf"


@pytest.mark.anyio
async def test_get_unknown_template():
    with pytest.raises(NotFoundError) as exc_info:
        get_template("erc4626-vault")

    assert "timelock" in exc_info.value.details["available"]


@pytest.mark.anyio
async def test_chain_value_templates():
    values = {t.id: t.value for t in list_templates("values")}
    assert values["chain-sepolia"] == "11155111"
    assert values["user-address"] == ":userAddress"
