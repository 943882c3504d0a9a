"""
Contract Deployment Modules
===========================

Declarative deployment modules for the SwitchAssets contracts.

Structure:
- descriptor: module builder and immutable module descriptors
- registry: per-run module registry
- artifacts: Hardhat artifact resolution
- executor: running modules through web3
- journal: deployed addresses per chain
- verification: hardhat verify commands for deployments
- asset_client: operating a deployed SwitchAssets registry
- modules/: the project's module definitions
"""

from .descriptor import ContractFuture, DeploymentModule, DeploymentStep, ModuleBuilder, build_module
from .errors import (
    DeploymentError,
    DuplicateModuleName,
    UndeclaredOutputReference,
    UnknownArtifact,
)
from .registry import ModuleRegistry

__version__ = "1.0.0"

__all__ = [
    'ContractFuture',
    'DeploymentError',
    'DeploymentModule',
    'DeploymentStep',
    'DuplicateModuleName',
    'ModuleBuilder',
    'ModuleRegistry',
    'UndeclaredOutputReference',
    'UnknownArtifact',
    'build_module',
]
