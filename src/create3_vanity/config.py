"""
Search configuration from command line arguments and environment variables.

Every option can also be given through the environment (or a .env file),
using the same names as the deployment shell scripts: DEPLOYER, PREFIX,
SUFFIX, START, COUNT, WORKERS and RPC.
"""

import os
from argparse import Namespace
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .search import DEFAULT_COUNT

DEPLOYER_ADDRESS_FILE = ".create3_deployer.addr"


@dataclass(frozen=True)
class SearchConfig:
    deployer: str
    prefix: str
    suffix: str
    start: int
    count: int
    workers: int
    rpc_url: Optional[str] = None


def _parse_int(name: str, value) -> int:
    if isinstance(value, int):
        return value
    text = str(value).strip().replace("_", "")
    try:
        literal = text.lower().lstrip("+-").startswith(("0x", "0o", "0b"))
        return int(text, 0 if literal else 10)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


def read_deployer_address(path: Optional[Path] = None) -> Optional[str]:
    """Read the deployer address saved by the deploy script, if any."""
    path = Path(path or DEPLOYER_ADDRESS_FILE)
    if not path.exists():
        return None
    address = path.read_text().strip()
    return address or None


def load_search_config(args: Namespace, env_file: Optional[Path] = None) -> SearchConfig:
    """Merge command line arguments with environment variables.

    Command line values take precedence. The deployer address falls back to
    the address file written by the deploy script.

    Args:
        args: Parsed arguments with deployer, prefix, suffix, start, count,
            workers and rpc_url attributes (None when not given).
        env_file: Optional .env file to load before reading the environment.

    Returns:
        SearchConfig ready to be handed to find_salt.

    Raises:
        ValueError: If the deployer is missing or a number is malformed.
    """
    load_dotenv(env_file)

    deployer = args.deployer or os.getenv("DEPLOYER") or read_deployer_address()
    if not deployer:
        raise ValueError(
            "Deployer address is required. Pass --deployer, set DEPLOYER "
            f"or deploy the Create3Deployer first ({DEPLOYER_ADDRESS_FILE})."
        )

    def pick(attr, env, default):
        value = getattr(args, attr)
        if value is None:
            value = os.getenv(env, default)
        return value

    return SearchConfig(
        deployer=deployer,
        prefix=pick("prefix", "PREFIX", ""),
        suffix=pick("suffix", "SUFFIX", ""),
        start=_parse_int("start", pick("start", "START", 0)),
        count=_parse_int("count", pick("count", "COUNT", DEFAULT_COUNT)),
        workers=_parse_int("workers", pick("workers", "WORKERS", 1)),
        rpc_url=pick("rpc_url", "RPC", None),
    )
