"""Path management utilities for kitty-deploy library."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .constants import DEFAULT_SCRIPT_PATHS
from .exceptions import ContractNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScriptPaths:
    """Absolute locations of the project directories the pipeline reads and writes."""

    root: Path
    artifacts: Path
    archive: Path
    cache: Path
    deployments: Path
    sources: Path
    tests: Path
    typechain: Path


def get_script_paths(root: Optional[Union[Path, str]] = None, **overrides: Union[Path, str]) -> ScriptPaths:
    """
    Build the project directory layout.

    Args:
        root: Project root (defaults to the current working directory)
        **overrides: Replacement for any default directory, relative to root or absolute

    Returns:
        ScriptPaths with every directory resolved to an absolute path

    Raises:
        TypeError: If an override names an unknown directory
    """
    root_path = Path.cwd() if root is None else Path(root).absolute()

    unknown = set(overrides) - set(DEFAULT_SCRIPT_PATHS)
    if unknown:
        raise TypeError(f"Unknown script path(s): {', '.join(sorted(unknown))}")

    resolved = {
        name: root_path / Path(overrides.get(name, default))
        for name, default in DEFAULT_SCRIPT_PATHS.items()
    }
    return ScriptPaths(root=root_path, **resolved)


def directory_has_files(directory: Path) -> bool:
    """
    Check whether a directory exists and contains at least one entry.

    Args:
        directory: Directory to inspect

    Returns:
        False for a missing or empty directory
    """
    if not directory.is_dir():
        return False
    return any(directory.iterdir())


def find_contract_source(paths: ScriptPaths, contract_name: str) -> str:
    """
    Locate <contract_name>.sol anywhere under the sources directory.

    Args:
        paths: Project layout
        contract_name: Contract name without extension

    Returns:
        Source path relative to the project root, with forward slashes
        (e.g., "contracts/HelloWorld.sol")

    Raises:
        ContractNotFoundError: If no matching file exists
    """
    matches = sorted(paths.sources.rglob(f"{contract_name}.sol")) if paths.sources.is_dir() else []
    if not matches:
        raise ContractNotFoundError(
            f"Contract {contract_name} not found under {paths.sources}"
        )

    if len(matches) > 1:
        logger.warning(
            "Found %d source files named %s.sol, using %s",
            len(matches),
            contract_name,
            matches[0],
        )

    match = matches[0]
    try:
        return match.relative_to(paths.root).as_posix()
    except ValueError:
        # Sources directory lives outside the project root
        return match.as_posix()
