import json
import os
from unittest.mock import MagicMock

import pytest
from hexbytes import HexBytes

ASSET_TUPLE = {"type": "tuple", "components": [
    {"name": "assetId", "type": "bytes32"},
    {"name": "assetOwner", "type": "address"},
    {"name": "description", "type": "string"},
    {"name": "registeredAt", "type": "uint256"},
]}

SWITCH_ASSETS_ABI = [
    {"type": "function", "name": "registerAsset", "inputs": [{"name": "description", "type": "string"}],
     "outputs": [], "stateMutability": "nonpayable"},
    {"type": "function", "name": "transferAsset",
     "inputs": [{"name": "assetId", "type": "bytes32"}, {"name": "newOwner", "type": "address"}],
     "outputs": [], "stateMutability": "nonpayable"},
    {"type": "function", "name": "getAsset", "inputs": [{"name": "assetId", "type": "bytes32"}],
     "outputs": [dict(ASSET_TUPLE, name="")], "stateMutability": "view"},
    {"type": "function", "name": "getAllAssets", "inputs": [],
     "outputs": [dict(ASSET_TUPLE, name="", type="tuple[]")], "stateMutability": "view"},
    {"type": "function", "name": "getMyAssets", "inputs": [],
     "outputs": [dict(ASSET_TUPLE, name="", type="tuple[]")], "stateMutability": "view"},
    {"type": "event", "name": "AssetRegistered", "anonymous": False, "inputs": [
        {"name": "assetId", "type": "bytes32", "indexed": True},
        {"name": "assetOwner", "type": "address", "indexed": True},
    ]},
    {"type": "event", "name": "OwnershipTransferred", "anonymous": False, "inputs": [
        {"name": "assetId", "type": "bytes32", "indexed": True},
        {"name": "oldOwner", "type": "address", "indexed": True},
        {"name": "newOwner", "type": "address", "indexed": True},
    ]},
]


@pytest.fixture
def mock_web3():
    """Return a helper building a MagicMock web3 whose transactions mine with the given receipt"""
    def _make(receipt):
        w3 = MagicMock()
        w3.eth.account.from_key.return_value.address = "0x" + "aa" * 20
        w3.eth.get_transaction_count.return_value = 3
        w3.eth.account.sign_transaction.return_value.raw_transaction = b"signed"
        w3.eth.send_raw_transaction.return_value = HexBytes(b"\xfe\xed")
        w3.eth.wait_for_transaction_receipt.return_value = receipt
        return w3
    return _make


@pytest.fixture
def write_artifact():
    """Return a helper writing a Hardhat artifact file"""
    def _write(artifacts_dir, source_name, contract_name, bytecode="0x6080", abi=None):
        path = os.path.join(str(artifacts_dir), source_name, f"{contract_name}.json")
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w') as f:
            json.dump({
                "_format": "hh-sol-artifact-1",
                "contractName": contract_name,
                "sourceName": source_name,
                "abi": abi if abi is not None else SWITCH_ASSETS_ABI,
                "bytecode": bytecode,
            }, f)
        return path
    return _write


@pytest.fixture
def artifacts_dir(tmp_path, write_artifact):
    """Artifacts directory holding SwitchAssets, Token and Vault"""
    directory = tmp_path / "artifacts"
    write_artifact(directory, "contracts/SwitchAssets.sol", "SwitchAssets")
    write_artifact(directory, "contracts/Token.sol", "Token", abi=[])
    write_artifact(directory, "contracts/Vault.sol", "Vault", abi=[])
    return str(directory)


ENV_VARS = ["RPC_URL", "PRIVATE_KEY", "NETWORK", "ARTIFACTS_DIR", "DEPLOYMENTS_DIR", "EXPLORER_URL", "TX_TIMEOUT",
            "CONTRACT_ADDRESS"]


@pytest.fixture
def clean_env(monkeypatch):
    """Unset deployment variables for the duration of a test"""
    # setenv first so teardown also removes values written by load_dotenv
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
