"""
Contract Artifacts
==================

Loads compiled contracts from a Hardhat artifacts directory:

    artifacts/contracts/SwitchAssets.sol/SwitchAssets.json
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import AmbiguousArtifact, InvalidArtifact, UnknownArtifact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractArtifact:
    """ABI and creation bytecode of a compiled contract"""
    contract_name: str
    source_name: str
    abi: List[Dict[str, Any]]
    bytecode: str

    @property
    def fully_qualified_name(self) -> str:
        return f"{self.source_name}:{self.contract_name}"

    @property
    def deployable(self) -> bool:
        return self.bytecode not in ("", "0x")


class ArtifactResolver:
    """Resolves contract names against compiled Hardhat artifacts"""

    def __init__(self, artifacts_dir: str):
        self.artifacts_dir = artifacts_dir
        self._cache: Dict[str, ContractArtifact] = {}

    def resolve(self, name: str, module_name: Optional[str] = None) -> ContractArtifact:
        """
        Load an artifact by contract name or fully qualified name.

        Args:
            name: ``SwitchAssets`` or ``contracts/SwitchAssets.sol:SwitchAssets``
            module_name: Module requesting the artifact, used in error messages

        Returns:
            The loaded ContractArtifact
        """
        if name in self._cache:
            return self._cache[name]

        if ":" in name:
            source_name, contract_name = name.rsplit(":", 1)
            path = os.path.join(self.artifacts_dir, source_name, f"{contract_name}.json")
            if not os.path.isfile(path):
                raise UnknownArtifact(name, self.artifacts_dir, module_name)
        else:
            matches = self._find(name)
            if not matches:
                raise UnknownArtifact(name, self.artifacts_dir, module_name)
            if len(matches) > 1:
                sources = ", ".join(os.path.relpath(os.path.dirname(p), self.artifacts_dir) for p in matches)
                raise AmbiguousArtifact(
                    f"artifact '{name}' exists in several sources ({sources}); use a fully qualified name",
                    module_name,
                )
            path = matches[0]

        artifact = self._load(path, name, module_name)
        self._cache[name] = artifact
        logger.debug(f"Resolved artifact {name} from {path}")
        return artifact

    def _find(self, contract_name: str) -> List[str]:
        if not os.path.isdir(self.artifacts_dir):
            return []
        matches = []
        for root, dirs, files in os.walk(self.artifacts_dir):
            dirs[:] = sorted(d for d in dirs if d != "build-info")
            if f"{contract_name}.json" in files:
                matches.append(os.path.join(root, f"{contract_name}.json"))
        return matches

    def _load(self, path: str, name: str, module_name: Optional[str]) -> ContractArtifact:
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise InvalidArtifact(f"could not read artifact '{name}' at {path}: {e}", module_name) from e

        if not isinstance(data, dict) or 'abi' not in data or 'bytecode' not in data:
            raise InvalidArtifact(f"artifact '{name}' at {path} has no abi/bytecode", module_name)

        return ContractArtifact(
            contract_name=data.get('contractName', os.path.splitext(os.path.basename(path))[0]),
            source_name=data.get('sourceName', os.path.relpath(os.path.dirname(path), self.artifacts_dir)),
            abi=data['abi'],
            bytecode=data['bytecode'],
        )
