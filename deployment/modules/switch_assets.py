"""SwitchAssets asset registry deployment."""

from typing import Dict

from web3 import Web3

from ..descriptor import ContractFuture, DeploymentModule, ModuleBuilder, build_module
from ..verification import VerificationRecord

MODULE_NAME = "SwitchAssetsModule"


def define_switch_assets(m: ModuleBuilder) -> Dict[str, ContractFuture]:
    switch_assets = m.contract("SwitchAssets")
    return {"switchAssets": switch_assets}


def build_switch_assets_module(registry=None) -> DeploymentModule:
    return build_module(MODULE_NAME, define_switch_assets, registry)


# Deployed on Base Sepolia
SWITCH_ASSETS_DEPLOYMENT = VerificationRecord(
    contract_name="SwitchAssets",
    address="0x3897196da6a4f2219ed4f183afa3a10c8c227f23",
    network="base-sepolia",
    explorer_url="https://sepolia.basescan.org",
)

# Deployed on Base with two constructor addresses
BASE_DEPLOYMENT = VerificationRecord(
    contract_name="SwitchAssets",
    address="0xf36f55d6df2f9d5c7829ed5751d7e88fd3e82c2e",
    network="base",
    constructor_args=(
        Web3.to_checksum_address("0xf2e7e2f51d7c9eea9b0313c2eca12f8e43bd1855"),
        Web3.to_checksum_address("0x527cabd4bb83f94f1fc1888d0691ef95e86795a1"),
    ),
    explorer_url="https://basescan.org",
)
