"""
Compiled contract artifacts.

Artifacts are the JSON files written by the Solidity toolchain. Truffle
places them flat in ``build/contracts/<Name>.json``; Hardhat nests them as
``artifacts/contracts/<Name>.sol/<Name>.json``. Both layouts are searched.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import ArtifactError, ArtifactNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class ContractArtifact:
    """Compiled contract: name, interface and creation bytecode"""
    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str
    source_path: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_deployable(self) -> bool:
        return self.bytecode not in ("", "0x")


def normalize_name(name: str) -> str:
    """'CredentialBox.sol' and 'CredentialBox' refer to the same artifact."""
    name = name.strip()
    if name.endswith(".sol"):
        name = name[:-len(".sol")]
    if not name:
        raise ArtifactNotFoundError("Artifact name must not be empty")
    return name


def load_artifact(file_path: str) -> ContractArtifact:
    """Loads a contract artifact from its JSON file."""
    try:
        with open(file_path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ArtifactError(f"Artifact {file_path} is not valid JSON: {e}") from e

    if 'abi' not in data:
        raise ArtifactError(f"Artifact {file_path} has no 'abi' entry")

    bytecode = data.get('bytecode')
    # solc standard JSON output nests bytecode under evm.bytecode.object
    if isinstance(bytecode, dict):
        bytecode = bytecode.get('object')
    if bytecode is None:
        raise ArtifactError(f"Artifact {file_path} has no 'bytecode' entry")
    if bytecode and not bytecode.startswith('0x'):
        bytecode = '0x' + bytecode

    contract_name = data.get('contractName') or os.path.splitext(os.path.basename(file_path))[0]

    return ContractArtifact(
        contract_name=contract_name,
        abi=data['abi'],
        bytecode=bytecode,
        source_path=data.get('sourceName') or data.get('sourcePath'),
        metadata={k: v for k, v in data.items() if k in ('compiler', 'networks', 'updatedAt')},
    )


class ArtifactResolver:
    """Resolves artifact names to compiled contracts in a build directory"""

    def __init__(self, build_dir: str):
        self.build_dir = build_dir
        self._cache: Dict[str, ContractArtifact] = {}

    def _candidate_paths(self, name: str) -> List[str]:
        return [
            os.path.join(self.build_dir, f"{name}.json"),
            os.path.join(self.build_dir, f"{name}.sol", f"{name}.json"),
        ]

    def require(self, name: str) -> ContractArtifact:
        name = normalize_name(name)
        if name in self._cache:
            return self._cache[name]

        for path in self._candidate_paths(name):
            if os.path.isfile(path):
                artifact = load_artifact(path)
                logger.debug(f"Resolved artifact {name} from {path}")
                self._cache[name] = artifact
                return artifact

        raise ArtifactNotFoundError(
            f"Could not find artifact {name!r} in {self.build_dir}. Please compile contracts first."
        )
