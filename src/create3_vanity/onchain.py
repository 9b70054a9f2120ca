"""
On-chain access to a deployed Create3Deployer contract.

The deployer itself is placed with CREATE2 through the standard deterministic
deployment proxy, so it lands at the same address on every network.
"""

from typing import Optional, Union

from eth_account import Account
from eth_utils import keccak
from web3 import Web3

from .derivation import (
    create2_address,
    parse_address,
    parse_salt,
    predict_address,
    to_checksum,
)

# Deterministic deployment proxy used by `forge create --salt`
CREATE2_FACTORY = "0x4e59b44847b379578588920cA78FbF26c0B4956C"

CREATE3_DEPLOYER_ABI = [
    {
        "inputs": [{"name": "salt", "type": "bytes32"}],
        "name": "predict",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "initCode", "type": "bytes"},
            {"name": "salt", "type": "bytes32"},
        ],
        "name": "deploy",
        "outputs": [{"name": "deployed", "type": "address"}],
        "stateMutability": "payable",
        "type": "function",
    },
]


def deployer_address_for(salt: Union[str, bytes], init_code: bytes) -> str:
    """Predict where the CREATE2 factory places a Create3Deployer.

    Args:
        salt: Salt passed to the factory.
        init_code: Creation bytecode of the Create3Deployer.

    Returns:
        Checksummed address of the deployer contract.
    """
    address = create2_address(
        parse_address(CREATE2_FACTORY), parse_salt(salt), keccak(init_code)
    )
    return to_checksum(address)


class Create3DeployerClient:
    """Thin wrapper around a deployed Create3Deployer contract"""

    def __init__(self, w3: Web3, address: Union[str, bytes]):
        self.w3 = w3
        self.address = to_checksum(parse_address(address))
        self.contract = w3.eth.contract(address=self.address, abi=CREATE3_DEPLOYER_ABI)

    def predict(self, salt: Union[str, bytes]) -> str:
        """Ask the contract where `salt` deploys to.

        Returns:
            Checksummed address reported by predict(bytes32).
        """
        address = self.contract.functions.predict(parse_salt(salt)).call()
        return Web3.to_checksum_address(address)

    def predict_locally(self, salt: Union[str, bytes]) -> str:
        """Compute the same prediction without touching the network."""
        return to_checksum(predict_address(parse_address(self.address), parse_salt(salt)))

    def verify_prediction(self, salt: Union[str, bytes]) -> bool:
        """Compare the local prediction with the contract's predict(bytes32)."""
        return self.predict(salt) == self.predict_locally(salt)

    def deploy(
        self,
        init_code: Union[str, bytes],
        salt: Union[str, bytes],
        account: Account,
        chain_id: int,
        gas_price: Optional[int] = None,
        gas_limit: Optional[int] = None,
        timeout: int = 300,
    ) -> str:
        """Deploy `init_code` through deploy(bytes,bytes32).

        Args:
            init_code: Creation bytecode (with constructor args) of the contract.
            salt: CREATE3 salt.
            account: Local account signing the transaction.
            chain_id: Chain ID for replay protection.
            gas_price: Gas price in wei; the node's price when None.
            gas_limit: Gas limit; estimated when None.
            timeout: Seconds to wait for the receipt.

        Returns:
            Transaction hash as a hex string.

        Raises:
            RuntimeError: If the transaction reverted.
        """
        if isinstance(init_code, str):
            init_code = bytes.fromhex(init_code[2:] if init_code.startswith("0x") else init_code)
        call = self.contract.functions.deploy(init_code, parse_salt(salt))

        if gas_limit is None:
            gas_limit = call.estimate_gas({"from": account.address}) + 100000
        transaction = call.build_transaction(
            {
                "chainId": chain_id,
                "gas": gas_limit,
                "gasPrice": gas_price if gas_price is not None else self.w3.eth.gas_price,
                "nonce": self.w3.eth.get_transaction_count(account.address),
                "from": account.address,
            }
        )

        signed_txn = self.w3.eth.account.sign_transaction(transaction, private_key=account.key)
        tx_hash = self.w3.eth.send_raw_transaction(signed_txn.raw_transaction)
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)

        if receipt["status"] != 1:
            raise RuntimeError(f"CREATE3 deployment failed: {tx_hash.hex()}")
        return tx_hash.hex()
