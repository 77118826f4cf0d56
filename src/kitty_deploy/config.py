"""Scripts config loading and validation for kitty-deploy library.

The scripts config lists, per network, which contracts to deploy, which
functions to call afterwards, and which deployments to verify:

    networks:
      localhost:
        deploy:
          - fqn_contractName: HelloWorld
            args: {args: ["Hello from deploy!", 42]}
        initialize:
          - fqn_contractName: HelloWorld
            function: initialize
            args: {args: ["Hello from initialize!", 99]}
        verify: []

Values are validated with Pydantic when loaded; unknown keys fail fast.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import DEFAULT_CONFIG_CANDIDATES, DEPLOYMENT_ADDRESS_CANDIDATES, VERIFY_ALL
from .exceptions import ConfigError, ConfigNotFoundError, NetworkNotFoundError

logger = logging.getLogger(__name__)


class StrictModel(BaseModel):
    """Base model that rejects unknown fields (catches typos)."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ArgumentInput(StrictModel):
    """Call arguments as authored; names/types are filled in from the ABI later."""

    args: list[Any] = Field(default_factory=list, description="Positional arguments, may nest")
    arg_names: list[str] | None = Field(
        None, validation_alias=AliasChoices("argNames", "arg_names")
    )
    arg_sigs: list[str] | None = Field(
        None, validation_alias=AliasChoices("argSigs", "arg_sigs")
    )


class DeployInput(StrictModel):
    """Loose deploy action."""

    contract_name: str = Field(
        ..., validation_alias=AliasChoices("fqn_contractName", "contractName", "contract_name")
    )
    file_path: str | None = Field(
        None, validation_alias=AliasChoices("fqn_filePath", "filePath", "file_path")
    )
    fully_qualified_name: str | None = Field(
        None, validation_alias=AliasChoices("fqn", "fullyQualifiedName", "fully_qualified_name")
    )
    args: ArgumentInput | None = None
    libraries: dict[str, str] | None = None


class InitializeInput(StrictModel):
    """Loose function-call action."""

    contract_name: str = Field(
        ..., validation_alias=AliasChoices("fqn_contractName", "contractName", "contract_name")
    )
    function_name: str = Field(
        ..., validation_alias=AliasChoices("function", "functionName", "function_name")
    )
    args: ArgumentInput | None = None


class NetworkActions(StrictModel):
    """The three action lists for one network."""

    deploy: list[DeployInput] = Field(default_factory=list)
    initialize: list[InitializeInput] = Field(default_factory=list)
    verify: list[str] = Field(default_factory=list)

    @field_validator("verify")
    @classmethod
    def all_stands_alone(cls, value: list[str]) -> list[str]:
        if VERIFY_ALL in value and len(value) > 1:
            raise ValueError(f'"{VERIFY_ALL}" cannot be combined with contract names')
        return value


class ScriptsConfig(StrictModel):
    """Root of the scripts config."""

    networks: dict[str, NetworkActions] = Field(default_factory=dict)

    def for_network(self, network_name: str) -> NetworkActions:
        """Return the action lists for a network.

        Raises:
            NetworkNotFoundError: If the config has no section for the network.
        """
        if network_name not in self.networks:
            raise NetworkNotFoundError(
                f"Network '{network_name}' not found in scripts config "
                f"(available: {', '.join(sorted(self.networks)) or 'none'})"
            )
        return self.networks[network_name]


class ConfigLoader(Protocol):
    """Anything that can produce a validated ScriptsConfig."""

    def load(self, config_path: str | Path | None = None) -> ScriptsConfig: ...


def _read_mapping(path: Path) -> Any:
    with open(path) as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {path}: {e}") from e


def validate_config_dict(data: Any, source: str = "<dict>") -> ScriptsConfig:
    """Validate an already-parsed config mapping.

    Raises:
        ConfigError: If the data does not match the schema.
    """
    try:
        return ScriptsConfig.model_validate(data or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid scripts config {source}:\n{e}") from e


class FileConfigLoader:
    """Loads the scripts config from YAML or JSON files under a project root."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path.cwd() if root is None else Path(root).absolute()

    def load(self, config_path: str | Path | None = None) -> ScriptsConfig:
        path = self.locate(config_path)
        logger.debug("Loading scripts config from %s", path)
        return validate_config_dict(_read_mapping(path), str(path))

    def locate(self, config_path: str | Path | None = None) -> Path:
        """Resolve an explicit config path, or the first existing default candidate.

        Raises:
            ConfigNotFoundError: If the file (or every candidate) is missing.
        """
        if config_path is not None:
            path = Path(config_path)
            if not path.is_absolute():
                path = self.root / path
            if not path.is_file():
                raise ConfigNotFoundError(f"Scripts config not found at {path}")
            return path

        for candidate in DEFAULT_CONFIG_CANDIDATES:
            path = self.root / candidate
            if path.is_file():
                return path

        raise ConfigNotFoundError(
            f"Could not find scripts config. Tried: {', '.join(DEFAULT_CONFIG_CANDIDATES)}"
        )


def load_deployment_addresses(root: str | Path) -> dict[str, dict[str, str]] | None:
    """Load the optional bring-your-own address file.

    Args:
        root: Project root containing deploymentAddresses.{yaml,yml,json}

    Returns:
        Mapping network -> contract name -> address, or None when no file exists.

    Raises:
        ConfigError: If the file exists but is not a mapping.
    """
    for candidate in DEPLOYMENT_ADDRESS_CANDIDATES:
        path = Path(root) / candidate
        if not path.is_file():
            continue
        data = _read_mapping(path)
        if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
            raise ConfigError(f"{path} must map network names to {{contract: address}} mappings")
        return {
            network: {name: str(address) for name, address in contracts.items()}
            for network, contracts in data.items()
        }
    return None


STARTER_CONFIG = {
    "networks": {
        "localhost": {"deploy": [], "initialize": [], "verify": []},
        "sepolia": {"deploy": [], "initialize": [], "verify": []},
    }
}


def init_scripts_config(output_path: str | Path = DEFAULT_CONFIG_CANDIDATES[0]) -> Path:
    """Write a starter scripts config unless one already exists.

    Args:
        output_path: Destination file, relative to the working directory or absolute.

    Returns:
        Absolute path of the (existing or created) config file.
    """
    path = Path(output_path).absolute()
    if path.exists():
        logger.info("Config already exists at %s", path)
        return path

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(STARTER_CONFIG, f, sort_keys=False)
    logger.info("Created %s", path)
    return path
