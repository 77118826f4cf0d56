"""Compiled artifact readers for kitty-deploy library."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import ArtifactNotFoundError

BUILD_INFO_DIR = "build-info"
DEBUG_SUFFIX = ".dbg.json"


def parse_artifact(file_path: Path) -> Dict[str, Any]:
    """
    Parse a hardhat compiled artifact JSON file.

    Args:
        file_path: Path to artifacts/<sourceName>/<ContractName>.json

    Returns:
        Dictionary with contract_name, source_name, abi and bytecode

    Raises:
        ArtifactNotFoundError: If the file lacks a contract name or ABI
    """
    with open(file_path) as f:
        data = json.load(f)

    if "contractName" not in data or "abi" not in data:
        raise ArtifactNotFoundError(f"Malformed artifact (missing contractName or abi): {file_path}")

    return {
        "contract_name": data["contractName"],
        "source_name": data.get("sourceName", ""),
        "abi": data["abi"],
        "bytecode": data.get("bytecode", "0x"),
    }


def find_abi_entry(
    abi: List[Dict[str, Any]], entry_type: str, name: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Find the first ABI entry of a given type (and name, for functions/events).

    Args:
        abi: Contract ABI
        entry_type: "constructor", "function", "event", ...
        name: Entry name, ignored when None

    Returns:
        The ABI entry, or None when absent
    """
    for item in abi:
        if item.get("type") != entry_type:
            continue
        if name is None or item.get("name") == name:
            return item
    return None


def extract_arg_names_and_sigs(abi_entry: Optional[Dict[str, Any]]) -> Tuple[List[str], List[str]]:
    """
    Pull parameter names and types out of an ABI entry.

    Args:
        abi_entry: Constructor or function ABI entry (None yields empty lists)

    Returns:
        Tuple of (names, types), e.g. (["greeting", "count"], ["string", "uint256"])
    """
    if not abi_entry or not abi_entry.get("inputs"):
        return [], []

    names = [param.get("name", "") for param in abi_entry["inputs"]]
    sigs = [param.get("type", "") for param in abi_entry["inputs"]]
    return names, sigs


class ArtifactStore:
    """Reads compiled contract artifacts from a hardhat artifacts directory."""

    def __init__(self, artifacts_dir: Path):
        self._artifacts_dir = Path(artifacts_dir)
        self._cache: Dict[str, Dict[str, Any]] = {}

    def read_artifact(self, contract_name: str) -> Dict[str, Any]:
        """
        Load the artifact for a bare or fully qualified contract name.

        Args:
            contract_name: "HelloWorld" or "contracts/HelloWorld.sol:HelloWorld"

        Returns:
            Parsed artifact (see parse_artifact)

        Raises:
            ArtifactNotFoundError: If no artifact, or more than one for a bare name
        """
        if contract_name not in self._cache:
            self._cache[contract_name] = parse_artifact(self._locate(contract_name))
        return self._cache[contract_name]

    def abi(self, contract_name: str) -> List[Dict[str, Any]]:
        return self.read_artifact(contract_name)["abi"]

    def constructor_inputs(self, contract_name: str) -> Tuple[List[str], List[str]]:
        """Constructor parameter (names, types) for a contract."""
        return extract_arg_names_and_sigs(find_abi_entry(self.abi(contract_name), "constructor"))

    def function_entry(self, contract_name: str, function_name: str) -> Optional[Dict[str, Any]]:
        return find_abi_entry(self.abi(contract_name), "function", function_name)

    def function_inputs(self, contract_name: str, function_name: str) -> Tuple[List[str], List[str]]:
        """Function parameter (names, types); empty when the function is not in the ABI."""
        return extract_arg_names_and_sigs(self.function_entry(contract_name, function_name))

    def _locate(self, contract_name: str) -> Path:
        if ":" in contract_name:
            source_name, _, name = contract_name.rpartition(":")
            candidate = self._artifacts_dir / source_name / f"{name}.json"
            if not candidate.is_file():
                raise ArtifactNotFoundError(f"Artifact for {contract_name} not found at {candidate}")
            return candidate

        matches = []
        if self._artifacts_dir.is_dir():
            matches = sorted(
                path
                for path in self._artifacts_dir.rglob(f"{contract_name}.json")
                if BUILD_INFO_DIR not in path.relative_to(self._artifacts_dir).parts
                and not path.name.endswith(DEBUG_SUFFIX)
            )

        if not matches:
            raise ArtifactNotFoundError(
                f"Artifact for {contract_name} not found in {self._artifacts_dir}. "
                "Compile the project first."
            )
        if len(matches) > 1:
            raise ArtifactNotFoundError(
                f"Multiple artifacts named {contract_name}; use a fully qualified name: "
                + ", ".join(str(m.relative_to(self._artifacts_dir)) for m in matches)
            )
        return matches[0]
