#!/usr/bin/env python3
"""
CREATE3 Deployment Script

Two steps, run once per network:
1. `deployer`: place the Create3Deployer contract through the CREATE2 factory
   with SALT2, so it has the same address on every network.
2. `token`: deploy CONTRACT's init code through the Create3Deployer with SALT3
   (typically found with find-vanity-salt).
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from eth_account import Account
from solcx import compile_standard, install_solc, set_solc_version
from web3 import Web3

from create3_vanity.config import DEPLOYER_ADDRESS_FILE
from create3_vanity.console import (
    print_error,
    print_header,
    print_info,
    print_success,
    print_warning,
)
from create3_vanity.derivation import parse_salt
from create3_vanity.onchain import (
    CREATE2_FACTORY,
    Create3DeployerClient,
    deployer_address_for,
)

# Load environment variables
load_dotenv()

SOLC_VERSION = "0.8.20"
DEFAULT_DEPLOYER_CONTRACT = "contracts/deployer.sol:Create3Deployer"


def split_contract_path(contract: str):
    """Split `path/File.sol:Name` into (Path, name)."""
    if ":" not in contract:
        raise ValueError(f"Contract must look like path/File.sol:Name, got {contract!r}")
    path, name = contract.rsplit(":", 1)
    return Path(path), name


def compile_contract(contract: str, constructor_args: str = "") -> Dict[str, Any]:
    """Compile a Solidity contract using solcx.

    Args:
        contract: Contract reference as `path/File.sol:Name`.
        constructor_args: ABI-encoded constructor arguments (hex) appended to
            the creation bytecode.

    Returns:
        Dictionary containing 'abi' and 'init_code' (bytes).

    Raises:
        FileNotFoundError: If the source file does not exist.
    """
    source_path, name = split_contract_path(contract)
    if not source_path.exists():
        raise FileNotFoundError(f"{source_path} not found")

    print_info(f"Compiling {contract} with solc {SOLC_VERSION}...")
    install_solc(SOLC_VERSION)
    set_solc_version(SOLC_VERSION)

    compiled_sol = compile_standard(
        {
            "language": "Solidity",
            "sources": {source_path.name: {"content": source_path.read_text()}},
            "settings": {
                "optimizer": {"enabled": True, "runs": 200},
                "outputSelection": {"*": {"*": ["abi", "evm.bytecode"]}},
            },
        },
        allow_paths=[str(source_path.parent.resolve())],
    )
    contract_data = compiled_sol["contracts"][source_path.name][name]

    args_hex = constructor_args[2:] if constructor_args.startswith("0x") else constructor_args
    init_code = bytes.fromhex(contract_data["evm"]["bytecode"]["object"] + args_hex)
    print_success(f"Compiled {name} ({len(init_code)} bytes of init code)")

    return {"abi": contract_data["abi"], "init_code": init_code}


class Create3Deployment:
    """Handles deployment of the Create3Deployer and of contracts through it"""

    def __init__(self, network: str = "local"):
        """
        Initialize the deployment

        Args:
            network: Network name from deployment_config.json
        """
        self.network = network
        self.config = self._load_config(network)
        if not self.config:
            raise ValueError(f"Configuration for network '{network}' not found")
        self.w3 = self._setup_web3()
        self.account = self._setup_account()

    def _load_config(self, network: str) -> Optional[Dict[str, Any]]:
        """Load network configuration from deployment_config.json.

        The RPC environment variable overrides the configured rpc_url.

        Raises:
            FileNotFoundError: If deployment_config.json is not found.
        """
        config_path = Path(__file__).parent / "deployment_config.json"
        if not config_path.exists():
            raise FileNotFoundError("deployment_config.json not found")

        with open(config_path, "r") as f:
            config = json.load(f).get(network)
        if config is not None and os.getenv("RPC"):
            config["rpc_url"] = os.getenv("RPC")
        return config

    def _setup_web3(self) -> Web3:
        """Setup Web3 connection to the configured network.

        Raises:
            ConnectionError: If connection to the network fails.
        """
        rpc_url = self.config["rpc_url"]
        print_info(f"Connecting to {self.network} network at {rpc_url}...")

        w3 = Web3(Web3.HTTPProvider(rpc_url))
        if not w3.is_connected():
            raise ConnectionError(
                f"Failed to connect to {self.network} network at {rpc_url}"
            )

        print_success(f"Connected to network (Chain ID: {w3.eth.chain_id})")
        return w3

    def _setup_account(self) -> Account:
        """Setup the sending account from the PK environment variable.

        Raises:
            ValueError: If PK is not set.
        """
        private_key = os.getenv("PK")
        if not private_key:
            raise ValueError(
                "PK not found in environment variables. "
                "Please set it in .env file or export it."
            )
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key

        account = Account.from_key(private_key)
        balance = self.w3.eth.get_balance(account.address)
        print_success(f"Sender address: {account.address}")
        print_success(f"Balance: {self.w3.from_wei(balance, 'ether')} ETH")
        if balance == 0:
            print_warning("Account has zero balance. Deployment will fail.")
        return account

    def _get_gas_price(self) -> int:
        """Gas price in wei: the node's price when config says 'auto', else the configured Gwei."""
        if self.config["gas_price"] == "auto":
            return self.w3.eth.gas_price
        return self.w3.to_wei(int(self.config["gas_price"]), "gwei")

    def _send(self, transaction: Dict[str, Any]) -> Dict[str, Any]:
        signed_txn = self.w3.eth.account.sign_transaction(
            transaction, private_key=self.account.key
        )
        tx_hash = self.w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        print_success(f"Transaction sent: {tx_hash.hex()}")
        print_info("Waiting for confirmation...")
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=300)
        if receipt["status"] != 1:
            raise RuntimeError(f"Transaction {tx_hash.hex()} failed")
        return receipt

    def deploy_deployer(self, salt: str, contract: str = DEFAULT_DEPLOYER_CONTRACT) -> str:
        """Deploy the Create3Deployer through the CREATE2 factory.

        Args:
            salt: bytes32 salt for the factory.
            contract: Create3Deployer source as `path/File.sol:Name`.

        Returns:
            Checksummed address of the Create3Deployer.
        """
        init_code = compile_contract(contract)["init_code"]
        salt_bytes = parse_salt(salt)
        address = deployer_address_for(salt_bytes, init_code)
        print_info(f"Predicted Create3Deployer address: {address}")

        if self.w3.eth.get_code(address):
            print_warning("Create3Deployer already deployed at this address")
        else:
            data = salt_bytes + init_code
            transaction = {
                "chainId": self.config["chain_id"],
                "to": CREATE2_FACTORY,
                "data": "0x" + data.hex(),
                "gas": self.config["gas_limit"],
                "gasPrice": self._get_gas_price(),
                "nonce": self.w3.eth.get_transaction_count(self.account.address),
                "from": self.account.address,
            }
            self._send(transaction)
            if not self.w3.eth.get_code(address):
                raise RuntimeError(f"No code at predicted address {address}")
            print_success(f"Create3Deployer deployed at: {address}")

        Path(DEPLOYER_ADDRESS_FILE).write_text(address + "\n")
        print_success(f"Address saved to {DEPLOYER_ADDRESS_FILE}")
        return address

    def deploy_token(
        self, deployer: str, salt: str, contract: str, constructor_args: str = ""
    ) -> str:
        """Deploy a contract through the Create3Deployer.

        Args:
            deployer: Create3Deployer address.
            salt: bytes32 CREATE3 salt.
            contract: Contract source as `path/File.sol:Name`.
            constructor_args: ABI-encoded constructor arguments (hex).

        Returns:
            Checksummed address of the deployed contract.
        """
        init_code = compile_contract(contract, constructor_args)["init_code"]
        client = Create3DeployerClient(self.w3, deployer)

        predicted = client.predict(salt)
        print_info(f"Predicted token address: {predicted}")
        if predicted != client.predict_locally(salt):
            raise RuntimeError(
                f"Deployer predicts {predicted}, local prediction is "
                f"{client.predict_locally(salt)}"
            )

        client.deploy(
            init_code,
            salt,
            self.account,
            chain_id=self.config["chain_id"],
            gas_price=self._get_gas_price(),
        )
        print_success(f"Deployed token address (deterministic): {predicted}")
        return predicted


def parse_arguments() -> argparse.Namespace:
    """Parse command line arguments for the deployment script."""
    parser = argparse.ArgumentParser(description="Deploy contracts with CREATE3")
    parser.add_argument(
        "--network",
        type=str,
        default="local",
        help="Network from deployment_config.json (default: local)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    deployer = subparsers.add_parser("deployer", help="Deploy the Create3Deployer")
    deployer.add_argument("--salt", default=os.getenv("SALT2"), help="bytes32 salt (env: SALT2)")
    deployer.add_argument("--contract", default=DEFAULT_DEPLOYER_CONTRACT)

    token = subparsers.add_parser("token", help="Deploy a contract via the Create3Deployer")
    token.add_argument("--deployer", default=os.getenv("DEPLOYER"), help="env: DEPLOYER")
    token.add_argument("--salt", default=os.getenv("SALT3"), help="bytes32 salt (env: SALT3)")
    token.add_argument("--contract", default=os.getenv("CONTRACT"), help="path:Name (env: CONTRACT)")
    token.add_argument("--args", default=os.getenv("ARGS", ""), help="ABI-encoded constructor args (env: ARGS)")
    return parser.parse_args()


def main():
    args = parse_arguments()
    print_header("CREATE3 Deployment")

    try:
        if not args.salt:
            raise ValueError("A bytes32 salt is required (--salt, SALT2 or SALT3)")
        deployment = Create3Deployment(network=args.network)

        if args.command == "deployer":
            deployment.deploy_deployer(args.salt, args.contract)
        else:
            if not args.contract:
                raise ValueError("CONTRACT (path:Name) is required")
            deployer = args.deployer
            if not deployer and Path(DEPLOYER_ADDRESS_FILE).exists():
                deployer = Path(DEPLOYER_ADDRESS_FILE).read_text().strip()
            if not deployer:
                raise ValueError("DEPLOYER address is required")
            deployment.deploy_token(deployer, args.salt, args.contract, args.args)
    except Exception as e:
        print_error(f"Deployment failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
