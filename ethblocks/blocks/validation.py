"""Block argument validation."""

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from eth_utils import to_checksum_address

from ..errors import InvalidArgument

ETHEREUM_ADDRESS = re.compile(r"^0x[a-fA-F0-9]{40}$")


def validate_address(value: Any, argument: str) -> str:
    """
    Validate an Ethereum address block argument.

    Args:
        value: Raw argument value from the host
        argument: Argument name, for the error message

    Returns:
        Checksummed address

    Raises:
        InvalidArgument: If value is not a 40 char hexadecimal with a 0x prefix
    """
    if not isinstance(value, str) or not ETHEREUM_ADDRESS.match(value):
        raise InvalidArgument(
            f'Invalid {argument} address "{value}". '
            "Must be a 40 char hexadecimal with a 0x prefix"
        )
    return to_checksum_address(value)


def parse_amount(value: Any, argument: str) -> int:
    """
    Parse a non-negative whole token amount.

    The host passes numbers as int, float or numeric string.
    """
    if isinstance(value, bool):
        raise InvalidArgument(f'Invalid {argument} "{value}". Must be a whole number')

    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise InvalidArgument(f'Invalid {argument} "{value}". Must be a whole number') from e

    if not amount.is_finite() or amount != amount.to_integral_value() or amount < 0:
        raise InvalidArgument(
            f'Invalid {argument} "{value}". Must be a non-negative whole number'
        )
    return int(amount)
