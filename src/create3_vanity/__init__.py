"""CREATE3 address prediction and vanity salt search."""

from .derivation import (
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
from .matcher import VanityPattern, matches_pattern
from .search import (
    MatchResult,
    SearchTask,
    SearchWorkerError,
    find_salt,
    partition,
    search_range,
)

__version__ = "0.1.0"
