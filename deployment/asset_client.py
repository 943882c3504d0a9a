"""
SwitchAssets Contract Client
============================

Operates a deployed SwitchAssets registry: registers assets, reads them back
and transfers ownership. Writes are signed with the configured key and sent
through deployment.executor.send_transaction; the AssetRegistered and
OwnershipTransferred events are read from the mined receipts.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Union

from web3 import Web3
from web3.exceptions import ContractLogicError
from web3.logs import DISCARD

from .artifacts import ArtifactResolver
from .config import DeploymentConfig
from .errors import AssetNotFound, ConfigurationError, ExecutionError, NotAssetOwner, TransactionFailed
from .executor import DeployedContract, send_transaction
from .journal import DeploymentJournal
from .modules.switch_assets import build_switch_assets_module

logger = logging.getLogger(__name__)

CONTRACT_NAME = "SwitchAssets"


@dataclass(frozen=True)
class Asset:
    asset_id: str
    owner: str
    description: str
    registered_at: int

    @classmethod
    def from_tuple(cls, value: Any) -> "Asset":
        """Build from the (id, owner, description, registeredAt) tuple returned by the contract"""
        asset_id, owner, description, registered_at = value
        return cls(
            asset_id=Web3.to_hex(asset_id),
            owner=Web3.to_checksum_address(owner),
            description=description,
            registered_at=int(registered_at),
        )


@dataclass(frozen=True)
class OwnershipTransfer:
    asset_id: str
    old_owner: str
    new_owner: str
    tx_hash: str


class SwitchAssetsClient:
    """Signs SwitchAssets transactions with a local key"""

    def __init__(self, w3: Web3, handle: DeployedContract, private_key: str, tx_timeout: int = 300):
        self.w3 = w3
        self.handle = handle
        self.contract = handle.bind(w3)
        self.private_key = private_key
        self.tx_timeout = tx_timeout
        self.account = w3.eth.account.from_key(private_key)

    def register_asset(self, description: str) -> Asset:
        """
        Register a new asset owned by the signing account.

        Args:
            description: Free-text description stored on chain

        Returns:
            The asset as read back with getAsset
        """
        if not description:
            raise ValueError("asset description must not be empty")

        tx_hash, receipt = send_transaction(
            self.w3, self.private_key, self.contract.functions.registerAsset(description),
            timeout=self.tx_timeout, label="registerAsset",
        )
        events = self.contract.events.AssetRegistered().process_receipt(receipt, errors=DISCARD)
        if not events:
            raise TransactionFailed(f"registerAsset (tx {tx_hash}) emitted no AssetRegistered event")

        asset_id = Web3.to_hex(events[0]['args']['assetId'])
        logger.info(f"Asset {asset_id} registered to {events[0]['args']['assetOwner']} in tx {tx_hash}")
        return self.get_asset(asset_id)

    def get_asset(self, asset_id: Union[str, bytes]) -> Asset:
        asset_bytes = _asset_id_bytes(asset_id)
        try:
            value = self.contract.functions.getAsset(asset_bytes).call()
        except ContractLogicError as e:
            if "ASSET_DOES_NOT_EXIST" in str(e):
                raise AssetNotFound(Web3.to_hex(asset_bytes)) from e
            raise ExecutionError(f"getAsset({Web3.to_hex(asset_bytes)}) reverted: {e}") from e
        return Asset.from_tuple(value)

    def get_all_assets(self) -> List[Asset]:
        return [Asset.from_tuple(value) for value in self.contract.functions.getAllAssets().call()]

    def get_my_assets(self) -> List[Asset]:
        """Assets owned by the signing account"""
        values = self.contract.functions.getMyAssets().call({'from': self.account.address})
        return [Asset.from_tuple(value) for value in values]

    def transfer_asset(self, asset_id: Union[str, bytes], new_owner: str) -> OwnershipTransfer:
        """
        Transfer an asset owned by the signing account.

        Ownership is checked with getAsset before anything is sent.

        Raises:
            NotAssetOwner: the signing account does not own the asset
            TransactionFailed: the transfer reverted or emitted no event
        """
        if not Web3.is_address(new_owner):
            raise ValueError(f"invalid new owner address: {new_owner!r}")
        new_owner = Web3.to_checksum_address(new_owner)

        asset = self.get_asset(asset_id)
        if asset.owner != self.account.address:
            raise NotAssetOwner(asset.asset_id, self.account.address, asset.owner)

        tx_hash, receipt = send_transaction(
            self.w3, self.private_key,
            self.contract.functions.transferAsset(_asset_id_bytes(asset_id), new_owner),
            timeout=self.tx_timeout, label=f"transferAsset({asset.asset_id})",
        )
        events = self.contract.events.OwnershipTransferred().process_receipt(receipt, errors=DISCARD)
        if not events:
            raise TransactionFailed(f"transferAsset (tx {tx_hash}) emitted no OwnershipTransferred event")

        args = events[0]['args']
        transfer = OwnershipTransfer(
            asset_id=Web3.to_hex(args['assetId']),
            old_owner=args['oldOwner'],
            new_owner=args['newOwner'],
            tx_hash=tx_hash,
        )
        logger.info(f"Asset {transfer.asset_id} transferred from {transfer.old_owner} "
                    f"to {transfer.new_owner} in tx {tx_hash}")
        return transfer


def switch_assets_handle(config: DeploymentConfig, chain_id: int) -> DeployedContract:
    """
    Locate the SwitchAssets instance to operate on.

    CONTRACT_ADDRESS wins; otherwise the address journaled for
    SwitchAssetsModule on this chain is used. The ABI comes from the
    compiled artifact.
    """
    artifact = ArtifactResolver(config.artifacts_dir).resolve(CONTRACT_NAME)
    future_id = build_switch_assets_module().outputs["switchAssets"].id

    address = config.contract_address
    if not address:
        address = DeploymentJournal.for_chain(config.deployments_dir, chain_id).address_of(future_id)
    if not address:
        raise ConfigurationError(
            f"no {CONTRACT_NAME} address for chain {chain_id}: set CONTRACT_ADDRESS or deploy the module first"
        )
    if not Web3.is_address(address):
        raise ConfigurationError(f"CONTRACT_ADDRESS is not a valid address: {address!r}")

    return DeployedContract(
        future_id=future_id,
        contract_name=artifact.contract_name,
        address=Web3.to_checksum_address(address),
        abi=artifact.abi,
    )


def _asset_id_bytes(asset_id: Union[str, bytes]) -> bytes:
    value = Web3.to_bytes(hexstr=asset_id) if isinstance(asset_id, str) else bytes(asset_id)
    if len(value) != 32:
        raise ValueError(f"asset id must be 32 bytes, got {len(value)}")
    return value
