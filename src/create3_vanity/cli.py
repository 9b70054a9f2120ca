#!/usr/bin/env python3
"""
CREATE3 Vanity Salt Finder

Searches a range of salts for one whose CREATE3 address, as produced by a
Create3Deployer at --deployer, starts with --prefix and ends with --suffix.

Usage:
    find-vanity-salt --deployer 0x... --prefix ab --suffix 12345
    find-vanity-salt --prefix ab --suffix 12345 --count 100000000 --workers 8

Exit codes: 0 match found, 1 no match in the range, 2 error.
"""

import argparse
import sys
import time
from typing import List, Optional

from web3 import Web3

from .config import load_search_config
from .console import print_error, print_header, print_info, print_success, print_warning
from .derivation import verify_proxy_hash
from .matcher import VanityPattern
from .onchain import Create3DeployerClient
from .search import SearchWorkerError, find_salt

EXIT_FOUND = 0
EXIT_NO_MATCH = 1
EXIT_ERROR = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the salt search.

    Options left out are None so the environment can fill them in.
    """
    parser = argparse.ArgumentParser(description="Find a vanity CREATE3 salt")
    parser.add_argument("--deployer", help="Create3Deployer address (env: DEPLOYER)")
    parser.add_argument("--prefix", help="Required hex prefix (env: PREFIX)")
    parser.add_argument("--suffix", help="Required hex suffix (env: SUFFIX)")
    parser.add_argument("--start", help="First salt to try (env: START, default: 0)")
    parser.add_argument(
        "--count", help="Number of salts to try (env: COUNT, default: 10000000)"
    )
    parser.add_argument(
        "--workers", help="Number of worker processes (env: WORKERS, default: 1)"
    )
    parser.add_argument(
        "--rpc-url",
        dest="rpc_url",
        help="Cross-check the match against the deployer on this RPC (env: RPC)",
    )
    return parser.parse_args(argv)


def verify_on_chain(rpc_url: str, deployer: str, salt: str) -> bool:
    """Compare a locally predicted address with the deployer's predict()."""
    w3 = Web3(Web3.HTTPProvider(rpc_url))
    if not w3.is_connected():
        raise ConnectionError(f"Failed to connect to {rpc_url}")

    client = Create3DeployerClient(w3, deployer)
    on_chain = client.predict(salt)
    print_info(f"On-chain prediction: {on_chain}")
    return on_chain == client.predict_locally(salt)


def report_progress(checked: int, value: int):
    print_info(f"Checked {checked:,}... current salt {value}")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_arguments(argv)

    try:
        verify_proxy_hash()
        config = load_search_config(args)

        print_header("CREATE3 Vanity Salt Search")
        print_info(f"Deployer: {config.deployer}")
        print_info(f"Pattern:  {VanityPattern(config.prefix, config.suffix)}")
        print_info(
            f"Range:    [{config.start}, {config.start + config.count}) "
            f"with {config.workers} worker(s)"
        )

        started = time.time()
        result = find_salt(
            config.deployer,
            prefix=config.prefix,
            suffix=config.suffix,
            start=config.start,
            count=config.count,
            workers=config.workers,
            progress=report_progress,
        )
        elapsed = time.time() - started
    except ValueError as e:
        print_error(f"Invalid input: {e}")
        return EXIT_ERROR
    except SearchWorkerError as e:
        print_error(f"{e} (result is inconclusive)")
        return EXIT_ERROR
    except RuntimeError as e:
        print_error(f"Self-check failed: {e}")
        return EXIT_ERROR
    except OSError as e:
        print_error(f"Could not read configuration: {e}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        print_warning("Search interrupted")
        return EXIT_ERROR

    if result is None:
        print_error("No match in the given range.")
        print_info("Increase COUNT, shift START or run more workers.")
        return EXIT_NO_MATCH

    print(f"Match found: SALT3={result.salt_hex} ADDRESS={result.address_hex}")
    rate = result.attempts / elapsed if elapsed > 0 else 0
    print_info(f"Attempts by winning worker: {result.attempts:,} ({rate:,.0f}/s, {elapsed:.2f}s)")

    if config.rpc_url:
        try:
            if verify_on_chain(config.rpc_url, config.deployer, result.salt_hex):
                print_success("On-chain prediction matches")
            else:
                print_error("On-chain prediction differs from the local one")
                return EXIT_ERROR
        except Exception as e:
            print_warning(f"Could not verify on chain: {e}")

    return EXIT_FOUND


if __name__ == "__main__":
    sys.exit(main())
