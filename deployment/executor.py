"""
Module Execution
================

Hands the steps of a deployment module to a ContractDeployer, which does the
actual signing and submission, and returns handles to the deployed contracts
keyed by the module's output names.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Type

from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from .artifacts import ArtifactResolver, ContractArtifact
from .config import DeploymentConfig
from .descriptor import ContractFuture, DeploymentModule
from .errors import DeploymentFailed, InvalidArtifact, NetworkConnectionError, TransactionFailed
from .journal import DeploymentJournal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeploymentReceipt:
    address: str
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None


@dataclass(frozen=True)
class DeployedContract:
    """Handle to a deployed contract instance"""
    future_id: str
    contract_name: str
    address: str
    abi: List[Dict[str, Any]]

    def bind(self, w3: Web3):
        """Return a web3 contract object for this deployment"""
        return w3.eth.contract(address=Web3.to_checksum_address(self.address), abi=self.abi)


class ContractDeployer(Protocol):
    def deploy(self, artifact: ContractArtifact, args: Sequence[Any], value: int = 0) -> DeploymentReceipt:
        ...


class Web3ContractDeployer:
    """Deploys contracts by signing constructor transactions with a local key"""

    def __init__(self, w3: Web3, private_key: str, tx_timeout: int = 300):
        self.w3 = w3
        self.private_key = private_key
        self.tx_timeout = tx_timeout

    def deploy(self, artifact: ContractArtifact, args: Sequence[Any], value: int = 0) -> DeploymentReceipt:
        contract = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

        tx_hash, receipt = send_transaction(
            self.w3, self.private_key, contract.constructor(*args),
            value=value, timeout=self.tx_timeout,
            label=f"deployment of {artifact.contract_name}", failure=DeploymentFailed,
        )
        if not receipt.get('contractAddress'):
            raise DeploymentFailed(f"deployment of {artifact.contract_name} created no contract (tx {tx_hash})")

        logger.info(f"{artifact.contract_name} deployed at {receipt['contractAddress']} "
                    f"in block {receipt['blockNumber']}")
        return DeploymentReceipt(
            address=receipt['contractAddress'],
            tx_hash=tx_hash,
            block_number=receipt['blockNumber'],
        )


def send_transaction(w3: Web3, private_key: str, call: Any, value: int = 0, timeout: int = 300,
                     label: str = "transaction", failure: Type[TransactionFailed] = TransactionFailed):
    """
    Sign a contract call or constructor with a local key, send it and wait.

    Args:
        w3: Connected web3 instance
        private_key: Key of the sending account
        call: Bound contract function or constructor (anything with build_transaction)
        value: Wei to send along
        timeout: Seconds to wait for the receipt
        label: Description used in logs and errors
        failure: Error raised when the transaction reverts

    Returns:
        Tuple of the 0x-prefixed transaction hash and the receipt
    """
    account = w3.eth.account.from_key(private_key)
    tx = call.build_transaction({
        'from': account.address,
        'nonce': w3.eth.get_transaction_count(account.address, 'pending'),
        'value': value,
    })

    signed_tx = w3.eth.account.sign_transaction(tx, private_key)
    tx_hash = Web3.to_hex(w3.eth.send_raw_transaction(signed_tx.raw_transaction))
    logger.info(f"{label} sent: {tx_hash}")

    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    if receipt['status'] != 1:
        raise failure(f"{label} reverted (tx {tx_hash})")
    return tx_hash, receipt


def connect(config: DeploymentConfig) -> Web3:
    """Connect to the configured RPC endpoint"""
    w3 = Web3(Web3.HTTPProvider(config.rpc_url))
    w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    if not w3.is_connected():
        raise NetworkConnectionError(f"could not connect to RPC URL {config.rpc_url}")
    logger.info(f"Connected to blockchain at {config.rpc_url}")
    return w3


def resolve_artifacts(module: DeploymentModule, resolver: ArtifactResolver) -> Dict[str, ContractArtifact]:
    """Resolve the artifact of every step, keyed by future id"""
    artifacts = {}
    for step in module.all_steps():
        artifact = resolver.resolve(step.artifact_name, step.future.module_name)
        if not artifact.deployable:
            raise InvalidArtifact(
                f"'{step.artifact_name}' has no bytecode (interface or abstract contract)",
                step.future.module_name,
            )
        artifacts[step.future.id] = artifact
    return artifacts


def run_module(module: DeploymentModule, deployer: ContractDeployer, resolver: ArtifactResolver,
               journal: Optional[DeploymentJournal] = None) -> Dict[str, DeployedContract]:
    """
    Deploy every step of a module that the journal does not already hold.

    Args:
        module: Module to deploy
        deployer: Collaborator that signs and submits constructor transactions
        resolver: Artifact lookup; all artifacts are resolved before anything is sent
        journal: Deployment state for the target chain; None deploys everything

    Returns:
        Deployed contract handles keyed by output name
    """
    artifacts = resolve_artifacts(module, resolver)
    existing = journal.deployed_addresses() if journal is not None else {}

    deployed: Dict[str, DeployedContract] = {}
    for step in module.all_steps():
        future_id = step.future.id
        artifact = artifacts[future_id]

        if future_id in existing:
            address = existing[future_id]
            logger.info(f"{future_id} already deployed at {address}, skipping")
        else:
            args = _substitute(step.args, deployed)
            logger.info(f"Deploying {future_id} ({artifact.contract_name}) with {len(args)} constructor args")
            receipt = deployer.deploy(artifact, args, step.value)
            address = receipt.address
            if journal is not None:
                journal.record(future_id, step.artifact_name, receipt)

        deployed[future_id] = DeployedContract(
            future_id=future_id,
            contract_name=artifact.contract_name,
            address=address,
            abi=artifact.abi,
        )

    return {name: deployed[future.id] for name, future in module.outputs.items()}


def _substitute(value: Any, deployed: Dict[str, DeployedContract]) -> Any:
    if isinstance(value, ContractFuture):
        return deployed[value.id].address
    if isinstance(value, tuple):
        return [_substitute(item, deployed) for item in value]
    return value
