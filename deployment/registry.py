"""Registry of the deployment modules loaded for one deployment run."""

import logging
from typing import Callable, Dict, Iterator, List, Mapping, Optional

from .descriptor import ContractFuture, DeploymentModule, ModuleBuilder, build_module
from .errors import DuplicateModuleName

logger = logging.getLogger(__name__)


class ModuleRegistry:
    """Write-once mapping of module name to module descriptor.

    Use one registry per run; leaving the ``with`` block clears it.
    """

    def __init__(self):
        self._modules: Dict[str, DeploymentModule] = {}

    def register(self, module: DeploymentModule) -> DeploymentModule:
        if module.name in self._modules:
            raise DuplicateModuleName(module.name)
        self._modules[module.name] = module
        logger.debug(f"Registered module {module.name} ({len(module.steps)} steps)")
        return module

    def build(self, name: str,
              define: Callable[[ModuleBuilder], Optional[Mapping[str, ContractFuture]]]) -> DeploymentModule:
        return build_module(name, define, registry=self)

    def get(self, name: str) -> DeploymentModule:
        try:
            return self._modules[name]
        except KeyError:
            raise KeyError(f"module '{name}' is not registered (known: {', '.join(self.names()) or 'none'})") from None

    def names(self) -> List[str]:
        return list(self._modules)

    def clear(self) -> None:
        self._modules.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[DeploymentModule]:
        return iter(list(self._modules.values()))

    def __enter__(self) -> "ModuleRegistry":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clear()
