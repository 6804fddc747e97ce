"""
Template catalog.

Immutable block prototypes grouped by category. The editor never hands a
catalog block out directly: get_template() and list_templates() return deep
copies, and attach() clones again with fresh ids.
"""

from typing import Any

from condition_studio.blocks.models import Block
from condition_studio.core.errors import NotFoundError
from condition_studio.domain.enums import ChainId

CONDITION_SLOT_KINDS = ["condition", "operator"]


def _chain_input() -> dict[str, Any]:
    return {"id": "chain", "type": ["value"], "label": "Chain ID", "inputType": "number"}


def _address_input() -> dict[str, Any]:
    return {"id": "contractAddress", "type": ["value"], "label": "Contract Address"}


def _growth_input() -> dict[str, Any]:
    return {"id": "condition-1", "type": CONDITION_SLOT_KINDS, "label": "Add Condition"}


_TEMPLATE_DATA: list[dict[str, Any]] = [
    # ------------------------------------------------------------------ time
    {
        "id": "timelock",
        "type": "condition",
        "category": "time",
        "label": "Time Lock",
        "properties": {"conditionType": "time", "method": "blocktime"},
        "inputs": [
            _chain_input(),
            {
                "id": "minTimestamp",
                "type": ["value"],
                "label": "Minimum Timestamp",
                "inputType": "number",
                "comparator": ">=",
            },
        ],
    },
    # ------------------------------------------------------------------- rpc
    {
        "id": "native-balance",
        "type": "condition",
        "category": "rpc",
        "label": "Native Balance",
        "properties": {"conditionType": "rpc", "method": "eth_getBalance"},
        "inputs": [
            _chain_input(),
            {
                "id": "minBalance",
                "type": ["value"],
                "label": "Minimum Balance (wei)",
                "inputType": "number",
                "comparator": ">=",
            },
        ],
    },
    # -------------------------------------------------------------- contract
    {
        "id": "erc20-balance",
        "type": "condition",
        "category": "contract",
        "label": "ERC20 Balance",
        "properties": {
            "conditionType": "contract",
            "method": "balanceOf",
            "standardContractType": "ERC20",
            "parameters": [":userAddress"],
        },
        "inputs": [
            _chain_input(),
            _address_input(),
            {
                "id": "tokenAmount",
                "type": ["value"],
                "label": "Token Amount",
                "inputType": "number",
                "comparator": ">=",
            },
        ],
    },
    {
        "id": "erc721-balance",
        "type": "condition",
        "category": "contract",
        "label": "ERC721 Balance",
        "properties": {
            "conditionType": "contract",
            "method": "balanceOf",
            "standardContractType": "ERC721",
            "parameters": [":userAddress"],
        },
        "inputs": [
            _chain_input(),
            _address_input(),
            {
                "id": "tokenAmount",
                "type": ["value"],
                "label": "Token Count",
                "inputType": "number",
                "comparator": ">=",
            },
        ],
    },
    {
        "id": "erc721-ownership",
        "type": "condition",
        "category": "contract",
        "label": "ERC721 Ownership",
        "properties": {
            "conditionType": "contract",
            "method": "ownerOf",
            "standardContractType": "ERC721",
            "parameters": [":tokenId"],
            "returnValueTest": {"comparator": "==", "value": ":userAddress"},
        },
        "inputs": [
            _chain_input(),
            _address_input(),
            {"id": "tokenId", "type": ["value"], "label": "Token ID", "inputType": "number"},
        ],
    },
    {
        "id": "erc1155-balance",
        "type": "condition",
        "category": "contract",
        "label": "ERC1155 Balance",
        "properties": {
            "conditionType": "contract",
            "method": "balanceOf",
            "standardContractType": "ERC1155",
            "parameters": [":userAddress", ":tokenId"],
        },
        "inputs": [
            _chain_input(),
            _address_input(),
            {"id": "tokenId", "type": ["value"], "label": "Token ID", "inputType": "number"},
            {
                "id": "tokenAmount",
                "type": ["value"],
                "label": "Token Amount",
                "inputType": "number",
                "comparator": ">=",
            },
        ],
    },
    {
        "id": "contract-call",
        "type": "condition",
        "category": "contract",
        "label": "Custom Contract Call",
        "properties": {
            "conditionType": "contract",
            "canAddParameters": True,
            "parameterCount": 1,
        },
        "inputs": [
            _chain_input(),
            _address_input(),
            {"id": "method", "type": ["value"], "label": "Method"},
            {"id": "param_0", "type": ["value"], "label": "Parameter 1"},
            {"id": "functionAbi", "type": ["value"], "label": "Function ABI (JSON)"},
            {
                "id": "expectedValue",
                "type": ["value"],
                "label": "Expected Value",
                "comparator": "==",
            },
        ],
    },
    # ------------------------------------------------------------- operators
    {
        "id": "and",
        "type": "operator",
        "category": "operators",
        "label": "AND",
        "properties": {"operator": "and"},
        "inputs": [_growth_input()],
    },
    {
        "id": "or",
        "type": "operator",
        "category": "operators",
        "label": "OR",
        "properties": {"operator": "or"},
        "inputs": [_growth_input()],
    },
    {
        "id": "not",
        "type": "operator",
        "category": "operators",
        "label": "NOT",
        "properties": {"operator": "not", "maxInputs": 1},
        "inputs": [_growth_input()],
    },
    # ---------------------------------------------------------------- values
    {
        "id": "user-address",
        "type": "value",
        "category": "values",
        "label": "User Address",
        "value": ":userAddress",
    },
    *(
        {
            "id": f"chain-{key}",
            "type": "value",
            "category": "values",
            "label": label,
            "value": str(chain.value),
        }
        for key, label, chain in [
            ("mainnet", "Ethereum Mainnet", ChainId.ETHEREUM_MAINNET),
            ("polygon", "Polygon", ChainId.POLYGON),
            ("amoy", "Polygon Amoy", ChainId.POLYGON_AMOY),
            ("sepolia", "Sepolia", ChainId.SEPOLIA),
        ]
    ),
]

_TEMPLATES: dict[str, Block] = {
    data["id"]: Block.model_validate({**data, "isTemplate": True}) for data in _TEMPLATE_DATA
}

TEMPLATE_CATEGORIES = tuple(dict.fromkeys(block.category for block in _TEMPLATES.values()))


def get_template(template_id: str) -> Block:
    """
    Return a copy of a catalog template.

    Raises:
        NotFoundError: If the template id is not in the catalog
    """
    template = _TEMPLATES.get(template_id)
    if template is None:
        raise NotFoundError(
            f"Template '{template_id}' not found",
            details={"template_id": template_id, "available": sorted(_TEMPLATES)},
        )
    return template.model_copy(deep=True)


def list_templates(category: str | None = None) -> list[Block]:
    """Copies of all templates, optionally restricted to one category, in catalog order."""
    return [
        template.model_copy(deep=True)
        for template in _TEMPLATES.values()
        if category is None or template.category == category
    ]
