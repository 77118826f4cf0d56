"""
kitty-deploy: config-driven deploy, initialize and verify runs for smart contracts
"""

from importlib.metadata import PackageNotFoundError, version

from .artifacts import ArtifactStore
from .config import FileConfigLoader, ScriptsConfig, init_scripts_config
from .deployments import MetadataStore
from .exceptions import (
    ArtifactNotFoundError,
    ConfigError,
    ConfigNotFoundError,
    ContractNotFoundError,
    FunctionNotFoundError,
    KittyError,
    NetworkNotFoundError,
    RpcError,
)
from .executor import LogSink, execute
from .network import JsonRpcClient, Transport
from .normalizer import normalize
from .paths import ScriptPaths, get_script_paths
from .resolver import resolve_action, resolve_args, resolve_libraries
from .runner import RunContext, build_context, deploy, initialize, quick_deploy, verify
from .types import (
    ActionKind,
    ArgumentRecord,
    DeployedContract,
    DeploymentRecord,
    Result,
    StrictDeploy,
    StrictInitialize,
    StrictVerify,
    TransactionHandle,
)

try:
    __version__ = version("kitty-deploy")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "deploy",
    "quick_deploy",
    "initialize",
    "verify",
    "build_context",
    "init_scripts_config",
    "RunContext",
    "MetadataStore",
    "ArtifactStore",
    "FileConfigLoader",
    "ScriptsConfig",
    "ScriptPaths",
    "get_script_paths",
    "JsonRpcClient",
    "Transport",
    "LogSink",
    "execute",
    "normalize",
    "resolve_action",
    "resolve_args",
    "resolve_libraries",
    "ActionKind",
    "ArgumentRecord",
    "DeployedContract",
    "DeploymentRecord",
    "Result",
    "StrictDeploy",
    "StrictInitialize",
    "StrictVerify",
    "TransactionHandle",
    "KittyError",
    "ConfigError",
    "ConfigNotFoundError",
    "NetworkNotFoundError",
    "ContractNotFoundError",
    "ArtifactNotFoundError",
    "FunctionNotFoundError",
    "RpcError",
]
