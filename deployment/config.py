"""Deployment settings read from the environment (and a local .env file)."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError


@dataclass
class DeploymentConfig:
    rpc_url: str = "http://localhost:8545"
    private_key: Optional[str] = None
    network: str = "localhost"
    artifacts_dir: str = "artifacts"
    deployments_dir: str = os.path.join("ignition", "deployments")
    explorer_url: Optional[str] = None
    tx_timeout: int = 300
    contract_address: Optional[str] = None

    def require_private_key(self) -> str:
        if not self.private_key:
            raise ConfigurationError("PRIVATE_KEY not found in environment")
        return self.private_key


def load_config(env_file: Optional[str] = None) -> DeploymentConfig:
    """Load configuration from environment variables, after reading .env"""
    load_dotenv(env_file)

    timeout = os.getenv("TX_TIMEOUT", "300")
    try:
        tx_timeout = int(timeout)
    except ValueError:
        raise ConfigurationError(f"TX_TIMEOUT must be an integer, got {timeout!r}") from None

    return DeploymentConfig(
        rpc_url=os.getenv("RPC_URL", "http://localhost:8545"),
        private_key=os.getenv("PRIVATE_KEY") or None,
        network=os.getenv("NETWORK", "localhost"),
        artifacts_dir=os.getenv("ARTIFACTS_DIR", "artifacts"),
        deployments_dir=os.getenv("DEPLOYMENTS_DIR", os.path.join("ignition", "deployments")),
        explorer_url=os.getenv("EXPLORER_URL") or None,
        tx_timeout=tx_timeout,
        contract_address=os.getenv("CONTRACT_ADDRESS") or None,
    )


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
