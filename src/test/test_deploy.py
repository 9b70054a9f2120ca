import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add deploy directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "deploy"))
import deploy_create3  # noqa: E402

from create3_vanity.onchain import deployer_address_for  # noqa: E402


def test_split_contract_path():
    path, name = deploy_create3.split_contract_path("contracts/deployer.sol:Create3Deployer")
    assert path == Path("contracts/deployer.sol")
    assert name == "Create3Deployer"

    with pytest.raises(ValueError):
        deploy_create3.split_contract_path("contracts/deployer.sol")


def test_load_config_with_rpc_override(monkeypatch):
    deployment = deploy_create3.Create3Deployment.__new__(deploy_create3.Create3Deployment)

    monkeypatch.delenv("RPC", raising=False)
    local = deployment._load_config("local")
    assert local["chain_id"] == 31337
    assert deployment._load_config("nowhere") is None

    monkeypatch.setenv("RPC", "http://node:8545")
    assert deployment._load_config("sepolia")["rpc_url"] == "http://node:8545"


def test_deploy_deployer_sends_salt_and_init_code(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    init_code = bytes.fromhex("6080604052")
    monkeypatch.setattr(
        deploy_create3, "compile_contract", lambda contract: {"abi": [], "init_code": init_code}
    )

    deployment = deploy_create3.Create3Deployment.__new__(deploy_create3.Create3Deployment)
    deployment.config = {"chain_id": 31337, "gas_price": "auto", "gas_limit": 3000000}
    deployment.account = MagicMock(address="0x" + "33" * 20)
    deployment.w3 = MagicMock()
    deployment.w3.eth.get_code.side_effect = [b"", b"\x60"]
    sent = []
    monkeypatch.setattr(deployment, "_send", lambda tx: sent.append(tx) or {"status": 1})

    salt = "0x" + "00" * 31 + "07"
    address = deployment.deploy_deployer(salt)

    assert address == deployer_address_for(salt, init_code)
    assert sent[0]["to"] == deploy_create3.CREATE2_FACTORY
    assert sent[0]["data"] == salt + init_code.hex()
    assert (tmp_path / ".create3_deployer.addr").read_text().strip() == address
