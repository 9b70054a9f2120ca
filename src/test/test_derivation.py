"""
Tests for CREATE3 address derivation.

Stage 1 is checked against the EIP-1014 CREATE2 examples, stage 2 against the
well-known CREATE address of the first contract deployed from
0x6ac7ea33f8831ea9dcc53393aaa88b25a785dbf0 with nonce 1.
"""

import pytest
import rlp
from eth_utils import keccak

from create3_vanity.derivation import (
    MAX_SALT,
    PROXY_INITCODE,
    PROXY_INITCODE_HASH,
    create2_address,
    create_address_nonce_one,
    format_salt,
    parse_address,
    parse_salt,
    predict_address,
    to_checksum,
    verify_proxy_hash,
)

DEPLOYER = bytes.fromhex("deadbeef00000000000000000000000000000000")
ZERO_SALT = bytes(32)


def test_proxy_hash_constant_matches_bytecode():
    assert keccak(PROXY_INITCODE) == PROXY_INITCODE_HASH
    verify_proxy_hash()


@pytest.mark.parametrize(
    "deployer, salt, init_code, expected",
    [
        (
            "0000000000000000000000000000000000000000",
            "00" * 32,
            "00",
            "4d1a2e2bb4f88f0250f26ffff098b0b30b26bf38",
        ),
        (
            "deadbeef00000000000000000000000000000000",
            "00" * 32,
            "00",
            "b928f69bb1d91cd65274e3c79d8986362984fda3",
        ),
        (
            "deadbeef00000000000000000000000000000000",
            "000000000000000000000000feed000000000000000000000000000000000000",
            "00",
            "d04116cdd17bebe565eb2422f2497e06cc1c9833",
        ),
        (
            "0000000000000000000000000000000000000000",
            "00" * 32,
            "deadbeef",
            "70f2b2914a2a4b783faefb75f459a580616fcb5e",
        ),
    ],
)
def test_create2_eip1014_vectors(deployer, salt, init_code, expected):
    address = create2_address(
        bytes.fromhex(deployer), bytes.fromhex(salt), keccak(bytes.fromhex(init_code))
    )
    assert address.hex() == expected


def test_create_nonce_one_vector():
    sender = bytes.fromhex("6ac7ea33f8831ea9dcc53393aaa88b25a785dbf0")
    assert create_address_nonce_one(sender).hex() == "343c43a37d37dff08ae8c4a11544c718abb4fcf8"


def test_stage_two_encoding_is_rlp_of_address_and_nonce_one():
    proxy = bytes.fromhex("00112233445566778899aabbccddeeff00112233")
    expected = keccak(rlp.encode([proxy, 1]))[12:]
    assert create_address_nonce_one(proxy) == expected


def test_predict_address_composes_both_stages():
    proxy = create2_address(DEPLOYER, ZERO_SALT, PROXY_INITCODE_HASH)
    assert predict_address(DEPLOYER, ZERO_SALT) == create_address_nonce_one(proxy)
    assert len(predict_address(DEPLOYER, ZERO_SALT)) == 20


def test_create3_golden_vector_zero_salt():
    proxy = create2_address(DEPLOYER, ZERO_SALT, PROXY_INITCODE_HASH)
    assert proxy.hex() == "7eab969136044bb4eb2bfdfdbc98cff682f345ef"
    assert predict_address(DEPLOYER, ZERO_SALT).hex() == "0f9b60ebc759bc3c969419dfc813bd74413b1991"


def test_stage_one_defaults_to_proxy_hash():
    assert create2_address(DEPLOYER, ZERO_SALT) == create2_address(
        DEPLOYER, ZERO_SALT, keccak(PROXY_INITCODE)
    )


def test_derivation_is_deterministic():
    salt = format_salt(12345)
    first = (create2_address(DEPLOYER, salt), predict_address(DEPLOYER, salt))
    for _ in range(3):
        assert (create2_address(DEPLOYER, salt), predict_address(DEPLOYER, salt)) == first


def test_neighbouring_salts_give_different_addresses():
    assert create2_address(DEPLOYER, format_salt(0)) != create2_address(DEPLOYER, format_salt(1))
    assert predict_address(DEPLOYER, format_salt(0)) != predict_address(DEPLOYER, format_salt(1))


def test_deployer_bit_flip_changes_address():
    other = bytes.fromhex("deadbeef00000000000000000000000000000001")
    assert create2_address(DEPLOYER, ZERO_SALT) != create2_address(other, ZERO_SALT)


def test_stage_two_ignores_anything_but_proxy_address():
    proxy = bytes.fromhex("ab" * 20)
    # The deployed code never enters the computation: same proxy, same result.
    assert create_address_nonce_one(proxy) == create_address_nonce_one(bytes(proxy))
    assert create_address_nonce_one(proxy) != create_address_nonce_one(bytes.fromhex("ac" * 20))


@pytest.mark.parametrize(
    "deployer, salt",
    [(bytes(19), ZERO_SALT), (bytes(21), ZERO_SALT), (DEPLOYER, bytes(31)), (DEPLOYER, bytes(33))],
)
def test_create2_rejects_malformed_lengths(deployer, salt):
    with pytest.raises(ValueError):
        create2_address(deployer, salt)


def test_create2_rejects_short_code_hash():
    with pytest.raises(ValueError):
        create2_address(DEPLOYER, ZERO_SALT, bytes(31))


def test_stage_two_rejects_malformed_length():
    with pytest.raises(ValueError):
        create_address_nonce_one(bytes(32))


def test_format_salt():
    assert format_salt(0) == ZERO_SALT
    assert format_salt(1) == bytes(31) + b"\x01"
    assert format_salt(MAX_SALT - 1) == b"\xff" * 32
    assert format_salt(256) != format_salt(1)


@pytest.mark.parametrize("value", [-1, MAX_SALT])
def test_format_salt_out_of_range(value):
    with pytest.raises(ValueError):
        format_salt(value)


def test_parse_salt():
    assert parse_salt("0x" + "00" * 31 + "2a") == format_salt(42)
    assert parse_salt("0x2a") == format_salt(42)
    assert parse_salt(42) == format_salt(42)
    assert parse_salt(ZERO_SALT) == ZERO_SALT
    for bad in ("0x", "0xzz", "0x" + "00" * 33, bytes(5)):
        with pytest.raises(ValueError):
            parse_salt(bad)


def test_parse_address_accepts_any_casing():
    lower = "0xdeadbeef00000000000000000000000000000000"
    assert parse_address(lower) == DEPLOYER
    assert parse_address(lower.upper()[2:]) == DEPLOYER
    assert parse_address(to_checksum(DEPLOYER)) == DEPLOYER
    assert parse_address(DEPLOYER) == DEPLOYER


@pytest.mark.parametrize("bad", ["0x1234", "0x" + "gg" * 20, "", bytes(19), 42])
def test_parse_address_rejects_malformed(bad):
    with pytest.raises(ValueError):
        parse_address(bad)


def test_to_checksum():
    assert to_checksum(bytes.fromhex("5aaeb6053f3e94c9b9a09f33669435e7ef1beaed")) == (
        "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
    )
