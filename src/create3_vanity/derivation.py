"""
CREATE3 Address Derivation

Two-hop deterministic deployment: a minimal proxy is placed with CREATE2 at an
address that depends only on (deployer, salt), and that proxy then deploys the
real contract with CREATE using its first nonce (always 1). The final address
therefore depends neither on the deployer's nonce nor on the deployed bytecode.

    proxy   = keccak256(0xff ++ deployer ++ salt ++ keccak256(PROXY_INITCODE))[12:]
    address = keccak256(rlp([proxy, 1]))[12:]
"""

from typing import Union

from eth_utils import keccak
from web3 import Web3

ADDRESS_LENGTH = 20
SALT_LENGTH = 32
MAX_SALT = 2**256

# Proxy that CREATE-deploys whatever init code it is called with.
PROXY_INITCODE = bytes.fromhex("67363d3d37363d34f03d5260086018f3")
PROXY_INITCODE_HASH = bytes.fromhex(
    "21c35dbe1b344a2488cf3321d6ce542f8e9f305544ff09e4993a62319a497c1f"
)

CREATE2_PREFIX = b"\xff"
# rlp([<20-byte string>, 1]): list of 22 bytes, 20-byte string marker, nonce 1
RLP_LIST_PREFIX = b"\xd6\x94"
RLP_NONCE_ONE = b"\x01"


def verify_proxy_hash() -> None:
    """Check that PROXY_INITCODE_HASH really is the hash of PROXY_INITCODE.

    Raises:
        RuntimeError: If the constant does not match the proxy bytecode.
    """
    actual = keccak(PROXY_INITCODE)
    if actual != PROXY_INITCODE_HASH:
        raise RuntimeError(
            f"Proxy init code hash mismatch: expected 0x{PROXY_INITCODE_HASH.hex()}, "
            f"got 0x{actual.hex()}"
        )


def create2_address(
    deployer: bytes, salt: bytes, code_hash: bytes = PROXY_INITCODE_HASH
) -> bytes:
    """Compute the CREATE2 address of a contract (stage 1).

    Args:
        deployer: 20-byte address of the contract executing CREATE2.
        salt: 32-byte salt.
        code_hash: 32-byte keccak256 of the init code. Defaults to the proxy.

    Returns:
        The 20-byte address.

    Raises:
        ValueError: If any input has the wrong length.
    """
    if len(deployer) != ADDRESS_LENGTH:
        raise ValueError(f"Deployer must be 20 bytes, got {len(deployer)}")
    if len(salt) != SALT_LENGTH:
        raise ValueError(f"Salt must be 32 bytes, got {len(salt)}")
    if len(code_hash) != 32:
        raise ValueError(f"Code hash must be 32 bytes, got {len(code_hash)}")

    return keccak(CREATE2_PREFIX + deployer + salt + code_hash)[12:]


def create_address_nonce_one(proxy: bytes) -> bytes:
    """Compute the address of the first contract created by `proxy` (stage 2).

    Args:
        proxy: 20-byte address of the creating contract.

    Returns:
        The 20-byte address.

    Raises:
        ValueError: If proxy is not 20 bytes.
    """
    if len(proxy) != ADDRESS_LENGTH:
        raise ValueError(f"Proxy must be 20 bytes, got {len(proxy)}")

    return keccak(RLP_LIST_PREFIX + proxy + RLP_NONCE_ONE)[12:]


def predict_address(deployer: bytes, salt: bytes) -> bytes:
    """Predict the final CREATE3 address for (deployer, salt)."""
    return create_address_nonce_one(create2_address(deployer, salt))


def format_salt(value: int) -> bytes:
    """Encode a non-negative integer as a 32-byte big-endian salt.

    Raises:
        ValueError: If value is negative or does not fit in 256 bits.
    """
    if value < 0 or value >= MAX_SALT:
        raise ValueError(f"Salt value out of range: {value}")
    return value.to_bytes(SALT_LENGTH, "big")


def parse_salt(salt: Union[str, int, bytes]) -> bytes:
    """Parse a salt given as 0x-hex string, integer or raw bytes.

    Hex strings shorter than 64 digits are left-padded with zeros.

    Raises:
        ValueError: If the salt is malformed or too long.
    """
    if isinstance(salt, bytes):
        if len(salt) != SALT_LENGTH:
            raise ValueError(f"Salt must be 32 bytes, got {len(salt)}")
        return salt
    if isinstance(salt, int):
        return format_salt(salt)

    body = salt[2:] if salt.lower().startswith("0x") else salt
    if not body or len(body) > SALT_LENGTH * 2:
        raise ValueError(f"Invalid salt: {salt!r}")
    try:
        return bytes.fromhex(body.zfill(SALT_LENGTH * 2))
    except ValueError:
        raise ValueError(f"Invalid salt: {salt!r}") from None


def parse_address(address: Union[str, bytes]) -> bytes:
    """Parse an address given as a hex string (any casing) or 20 raw bytes.

    Raises:
        ValueError: If the address is not exactly 20 bytes of hex.
    """
    if isinstance(address, bytes):
        if len(address) != ADDRESS_LENGTH:
            raise ValueError(f"Address must be 20 bytes, got {len(address)}")
        return address
    if not isinstance(address, str):
        raise ValueError(f"Unsupported address type: {type(address).__name__}")

    body = address[2:] if address.lower().startswith("0x") else address
    if len(body) != ADDRESS_LENGTH * 2:
        raise ValueError(f"Invalid address: {address!r}")
    try:
        return bytes.fromhex(body)
    except ValueError:
        raise ValueError(f"Invalid address: {address!r}") from None


def to_checksum(address: bytes) -> str:
    """Render a 20-byte address as an EIP-55 checksummed string."""
    return Web3.to_checksum_address("0x" + address.hex())
