"""Account address parsing."""

import re

from solders.pubkey import Pubkey

from walletsend.errors import InvalidAddress

_BASE58_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def parse_address(address) -> Pubkey:
    """
    Parse a base58 account address.

    Args:
        address: Base58 string or an existing Pubkey

    Returns:
        The parsed public key

    Raises:
        InvalidAddress: If the input is not a 32-byte base58 public key
    """
    if isinstance(address, Pubkey):
        return address

    if not isinstance(address, str) or not _BASE58_PATTERN.match(address):
        raise InvalidAddress(str(address), "not a base58 public key")

    try:
        return Pubkey.from_string(address)
    except Exception as exc:  # noqa: BLE001
        raise InvalidAddress(address, str(exc)) from exc
