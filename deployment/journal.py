"""
Deployment Journal
==================

Persists what has been deployed on a chain so that re-running a module
reuses existing contracts instead of deploying them again.

Layout of a deployment directory (one per chain):
- deployed_addresses.json: {"SwitchAssetsModule#SwitchAssets": "0x..."}
- journal.jsonl: one JSON record per confirmed deployment
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from web3 import Web3

from .errors import JournalError

logger = logging.getLogger(__name__)

ADDRESSES_FILE = "deployed_addresses.json"
JOURNAL_FILE = "journal.jsonl"


class DeploymentJournal:
    def __init__(self, deployment_dir: str):
        self.deployment_dir = deployment_dir
        self.addresses_path = os.path.join(deployment_dir, ADDRESSES_FILE)
        self.journal_path = os.path.join(deployment_dir, JOURNAL_FILE)

    @classmethod
    def for_chain(cls, deployments_dir: str, chain_id: int) -> "DeploymentJournal":
        return cls(os.path.join(deployments_dir, f"chain-{chain_id}"))

    def deployed_addresses(self) -> Dict[str, str]:
        if not os.path.exists(self.addresses_path):
            return {}
        try:
            with open(self.addresses_path, 'r') as f:
                addresses = json.load(f)
        except (OSError, ValueError) as e:
            raise JournalError(f"cannot read {self.addresses_path}: {e}") from e
        if not isinstance(addresses, dict):
            raise JournalError(f"{self.addresses_path} must hold a JSON object, got {type(addresses).__name__}")
        return addresses

    def address_of(self, future_id: str) -> Optional[str]:
        return self.deployed_addresses().get(future_id)

    def record(self, future_id: str, artifact_name: str, receipt: Any) -> None:
        """Store a confirmed deployment.

        ``receipt`` is a DeploymentReceipt (address, tx_hash, block_number).
        """
        addresses = self.deployed_addresses()
        os.makedirs(self.deployment_dir, exist_ok=True)
        address = Web3.to_checksum_address(receipt.address)

        entry = {
            'futureId': future_id,
            'artifact': artifact_name,
            'address': address,
            'txHash': receipt.tx_hash,
            'blockNumber': receipt.block_number,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }
        with open(self.journal_path, 'a') as f:
            f.write(json.dumps(entry) + "\n")

        addresses[future_id] = address
        tmp_path = self.addresses_path + ".tmp"
        with open(tmp_path, 'w') as f:
            json.dump(addresses, f, indent=2)
        os.replace(tmp_path, self.addresses_path)

        logger.info(f"Recorded {future_id} at {address} in {self.deployment_dir}")

    def records(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.journal_path):
            return []
        entries = []
        try:
            with open(self.journal_path, 'r') as f:
                for number, line in enumerate(f, 1):
                    if line.strip():
                        entries.append(json.loads(line))
        except ValueError as e:
            raise JournalError(f"{self.journal_path} line {number} is not valid JSON: {e}") from e
        except OSError as e:
            raise JournalError(f"cannot read {self.journal_path}: {e}") from e
        return entries
