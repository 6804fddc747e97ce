"""
Domain enums for the block tree and the condition document.

These enums are the closed value sets shared by the block model, the editor
and the compiler. String enums serialize to their raw value so they can be
used directly in JSON payloads.
"""

from enum import Enum, IntEnum


class BlockKind(str, Enum):
    """Kind of a block in the visual tree."""

    CONDITION = "condition"
    OPERATOR = "operator"
    VALUE = "value"


class ConditionType(str, Enum):
    """
    Leaf condition families understood by the compiler.

    COMPOUND only appears in the compiled document, never on a block.
    """

    TIME = "time"
    RPC = "rpc"
    CONTRACT = "contract"
    COMPOUND = "compound"


class LogicalOperator(str, Enum):
    """Boolean combinators for compound conditions."""

    AND = "and"
    OR = "or"
    NOT = "not"


class Comparator(str, Enum):
    """Comparators allowed in a return value test."""

    GTE = ">="
    GT = ">"
    LTE = "<="
    LT = "<"
    EQ = "=="
    NE = "!="


class ChainId(IntEnum):
    """
    Chains the decryption network accepts conditions for.

    The set is closed: anything else is rejected by resolve_chain().
    """

    ETHEREUM_MAINNET = 1
    POLYGON = 137
    POLYGON_AMOY = 80002
    SEPOLIA = 11155111


class StandardContractType(str, Enum):
    """Token standards with a built-in ABI on the decryption network."""

    ERC20 = "ERC20"
    ERC721 = "ERC721"
    ERC1155 = "ERC1155"


class InputType(str, Enum):
    """Display hint for a slot's text field."""

    TEXT = "text"
    NUMBER = "number"


# Comparators a user may pick in the block editor (NE is document-only)
EDITOR_COMPARATORS = frozenset(
    {Comparator.GTE, Comparator.GT, Comparator.LTE, Comparator.LT, Comparator.EQ}
)

# Slots that render a comparator next to their value field
NUMERIC_TEST_SLOTS = frozenset(
    {"minBalance", "minTimestamp", "tokenAmount", "expectedValue"}
)

VALID_CHAIN_IDS = tuple(chain.value for chain in ChainId)
