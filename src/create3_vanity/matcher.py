"""
Vanity pattern matching on the lowercase hex body of an address.
"""

import string
from dataclasses import dataclass
from typing import Union

_HEX_DIGITS = frozenset(string.hexdigits.lower())


def _normalize(part: str, name: str) -> str:
    part = (part or "").lower()
    if not set(part) <= _HEX_DIGITS:
        raise ValueError(f"{name} must be hexadecimal, got {part!r}")
    return part


def address_body(address: Union[str, bytes]) -> str:
    """Return the 40-digit lowercase hex body of an address.

    Checksum casing and the 0x prefix are discarded.

    Raises:
        ValueError: If the address is not 20 bytes or 40 hex digits.
    """
    if isinstance(address, bytes):
        if len(address) != 20:
            raise ValueError(f"Address must be 20 bytes, got {len(address)}")
        return address.hex()
    body = address.lower()
    if body.startswith("0x"):
        body = body[2:]
    if len(body) != 40 or not set(body) <= _HEX_DIGITS:
        raise ValueError(f"Invalid address: {address!r}")
    return body


@dataclass(frozen=True)
class VanityPattern:
    """Required prefix and suffix of an address, compared case-insensitively.

    Both checks are independent, so a prefix and suffix whose combined length
    exceeds 40 digits may share characters.
    """

    prefix: str = ""
    suffix: str = ""

    def __post_init__(self):
        prefix = self.prefix or ""
        if prefix[:2].lower() == "0x":
            prefix = prefix[2:]
        object.__setattr__(self, "prefix", _normalize(prefix, "Prefix"))
        object.__setattr__(self, "suffix", _normalize(self.suffix, "Suffix"))

    def matches(self, address: Union[str, bytes]) -> bool:
        body = address_body(address)
        return body.startswith(self.prefix) and body.endswith(self.suffix)

    def __str__(self) -> str:
        return f"0x{self.prefix}...{self.suffix}"


def matches_pattern(address: Union[str, bytes], prefix: str, suffix: str) -> bool:
    """Check an address against a prefix and suffix.

    Example:
        >>> matches_pattern("0xAB00000000000000000000000000000000012345", "ab", "12345")
        True
    """
    return VanityPattern(prefix, suffix).matches(address)
