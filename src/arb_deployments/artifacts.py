"""Compiled artifact loading for arb-deployments library."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

from .constants import DEFAULT_CONTRACT_VERSION
from .exceptions import ArtifactError


@dataclass(frozen=True)
class CompiledArtifact:
    """A compiled contract ready to be deployed."""

    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str  # 0x-prefixed creation bytecode
    version: str  # Version tag the deployed contract is expected to report
    source_name: str = ""


def parse_hardhat_artifact(
    file_path: Union[Path, str], version: str = DEFAULT_CONTRACT_VERSION
) -> CompiledArtifact:
    """
    Parse a Hardhat compilation artifact.

    Only contracts without constructor arguments are supported, since
    deployments never pass any.

    Args:
        file_path: Path to artifacts/contracts/{Name}.sol/{Name}.json
        version: Version tag expected from getContractInfo()

    Returns:
        CompiledArtifact

    Raises:
        ArtifactError: If the file is missing, not JSON, has no bytecode
            (abstract contract or interface) or needs constructor arguments
    """
    file_path = Path(file_path)
    try:
        with open(file_path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ArtifactError(
            f"Artifact not found at {file_path}. Compile the contracts first."
        ) from e
    except json.JSONDecodeError as e:
        raise ArtifactError(f"Artifact {file_path} is not valid JSON: {e}") from e

    for required in ("abi", "bytecode"):
        if required not in data:
            raise ArtifactError(f"Artifact {file_path} is missing '{required}'")

    bytecode = data["bytecode"]
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    if bytecode == "0x":
        raise ArtifactError(
            f"Artifact {file_path} has empty bytecode (abstract contract or interface)"
        )

    abi = data["abi"]
    for item in abi:
        if item.get("type") == "constructor" and item.get("inputs"):
            raise ArtifactError(
                f"Constructor of {data.get('contractName', file_path.stem)} takes "
                f"{len(item['inputs'])} argument(s); only argument-free deployments are supported"
            )

    return CompiledArtifact(
        contract_name=data.get("contractName", file_path.stem),
        abi=abi,
        bytecode=bytecode,
        version=version,
        source_name=data.get("sourceName", ""),
    )
