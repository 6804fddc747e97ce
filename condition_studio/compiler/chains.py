"""
Chain ID validation.

One policy is used everywhere: a chain the user actually entered must be a
supported chain or it is rejected with an error listing the valid ids; the
configured default is substituted only when nothing was entered at all.
"""

import logging
import re

from condition_studio.core.config import settings
from condition_studio.core.errors import ChainValidationError
from condition_studio.domain.enums import VALID_CHAIN_IDS, ChainId

logger = logging.getLogger(__name__)

# Plain ASCII decimal integer: no "_" separators, no non-ASCII digits
INTEGER_LITERAL_PATTERN = re.compile(r"[+-]?[0-9]+")


def is_valid_chain_id(chain_id: object) -> bool:
    """True for an int (not bool) in the supported chain set."""
    return (
        isinstance(chain_id, int)
        and not isinstance(chain_id, bool)
        and chain_id in VALID_CHAIN_IDS
    )


def resolve_chain(raw: str | int | float | None, default: ChainId | None = None) -> ChainId:
    """
    Resolve a raw chain slot value to a supported chain.

    Args:
        raw: Value entered in the chain slot (string from a text field, or a number)
        default: Chain to use when nothing was entered (settings default if None)

    Returns:
        The resolved ChainId

    Raises:
        ChainValidationError: If a value was entered and it is not a supported chain id

    Example:
        >>> resolve_chain("137")
        <ChainId.POLYGON: 137>
        >>> resolve_chain("")
        <ChainId.SEPOLIA: 11155111>
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        chain = default if default is not None else settings.default_chain
        logger.debug("No chain entered, using default %s", chain.value)
        return chain

    chain_id = _parse_chain_id(raw)
    if chain_id is None or chain_id not in VALID_CHAIN_IDS:
        valid = ", ".join(str(c) for c in VALID_CHAIN_IDS)
        raise ChainValidationError(
            f"Invalid chain ID '{raw}'. Must be one of: {valid}",
            details={"chain": str(raw), "valid_chains": list(VALID_CHAIN_IDS)},
        )
    return ChainId(chain_id)


def parse_integer_literal(raw: str) -> int | None:
    """Parse a plain decimal integer string, or return None."""
    text = raw.strip()
    if not INTEGER_LITERAL_PATTERN.fullmatch(text):
        return None
    return int(text)


def _parse_chain_id(raw: str | int | float) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    return parse_integer_literal(raw)
