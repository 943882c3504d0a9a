"""
Deployment Errors
=================

Every failure raised by the deployment package derives from DeploymentError,
so callers (the CLI, scripts) can report them uniformly.
"""

from typing import Optional


class DeploymentError(Exception):
    """Base class for all deployment errors"""

    def __init__(self, message: str, module_name: Optional[str] = None):
        self.module_name = module_name
        if module_name:
            message = f"[{module_name}] {message}"
        super().__init__(message)


# --- Build time -------------------------------------------------------------

class DeploymentModuleError(DeploymentError):
    """A module descriptor is malformed or conflicts with another one"""


class InvalidModuleName(DeploymentModuleError, ValueError):
    pass


class DuplicateModuleName(DeploymentModuleError):
    def __init__(self, module_name: str):
        super().__init__(
            f"module name '{module_name}' is already registered in this run",
            module_name,
        )


class UndeclaredOutputReference(DeploymentModuleError):
    pass


class UnknownFutureReference(DeploymentModuleError):
    pass


class DuplicateFutureId(DeploymentModuleError):
    pass


class InvalidConstructorArgument(DeploymentModuleError, TypeError):
    pass


class ModuleBuilderClosed(DeploymentModuleError):
    pass


# --- Artifacts --------------------------------------------------------------

class ArtifactError(DeploymentError):
    """A compiled contract artifact could not be used"""


class UnknownArtifact(ArtifactError):
    def __init__(self, artifact_name: str, search_path: str, module_name: Optional[str] = None):
        self.artifact_name = artifact_name
        super().__init__(
            f"artifact '{artifact_name}' not found under {search_path}",
            module_name,
        )


class AmbiguousArtifact(ArtifactError):
    pass


class InvalidArtifact(ArtifactError):
    pass


# --- Execution --------------------------------------------------------------

class ExecutionError(DeploymentError):
    """A deployment step failed on the network"""


class TransactionFailed(ExecutionError):
    """A transaction was mined but reverted, or did what it should not"""


class DeploymentFailed(TransactionFailed):
    pass


class AssetNotFound(ExecutionError):
    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"asset {asset_id} does not exist")


class NotAssetOwner(ExecutionError):
    def __init__(self, asset_id: str, account: str, owner: str):
        self.asset_id = asset_id
        self.account = account
        self.owner = owner
        super().__init__(f"account {account} does not own asset {asset_id} (owner is {owner})")


# --- Local state ------------------------------------------------------------

class JournalError(DeploymentError):
    """The deployment journal on disk is unreadable or corrupt"""


class ConfigurationError(DeploymentError):
    pass


class NetworkConnectionError(DeploymentError):
    pass
