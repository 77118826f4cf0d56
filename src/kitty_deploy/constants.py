"""Configuration constants for kitty-deploy library."""

import re

# Reference tokens resolved against run state just before execution
ADDRESS_REFERENCE_RE = re.compile(r"^(?P<name>[^.\s]+)\.address$")
SIGNER_REFERENCE_RE = re.compile(r"^SIGNER\[(?P<index>.*)\]$")
ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

# Sentinel strings substituted for references that cannot be resolved
CONTRACT_NOT_FOUND = "contract not found"
SIGNER_OUT_OF_BOUNDS = "signer index out of bounds"

# Verify list sentinel meaning "every contract in the metadata store"
VERIFY_ALL = "ALL"

# Default project layout (relative to the project root)
DEFAULT_SCRIPT_PATHS = {
    "artifacts": "artifacts",
    "archive": "archive",
    "cache": "cache",
    "deployments": "deployments",
    "sources": "contracts",
    "tests": "test",
    "typechain": "typechain",
}

# Directories copied into an archive snapshot, keyed by their name in the snapshot
ARCHIVED_DIRECTORIES = ("artifacts", "deployments", "typechain")

# Scripts config candidates, tried in order when no explicit path is given
DEFAULT_CONFIG_CANDIDATES = (
    "scripts/config/scriptsConfig.yaml",
    "scripts/config/scriptsConfig.yml",
    "scripts/config/scriptsConfig.json",
    "scripts.config.yaml",
    "scripts.config.yml",
    "scripts.config.json",
)

# Bring-your-own address files, keyed network -> contract name -> address
DEPLOYMENT_ADDRESS_CANDIDATES = (
    "deploymentAddresses.yaml",
    "deploymentAddresses.yml",
    "deploymentAddresses.json",
)

# Network naming: the in-process hardhat network shares localhost's config section
HARDHAT = "hardhat"
LOCALHOST = "localhost"

# Chain ids resolved by JsonRpcClient.network_name()
CHAIN_NAMES = {
    1: "mainnet",
    100: "gnosis",
    11155111: "sepolia",
    31337: LOCALHOST,
}

# Environment variables read as defaults by build_context()
ENV_CONFIG_PATH = "KIT_CONFIG"
ENV_SIGNER_INDEX = "SIGNERINDEX"
ENV_PRINT = "PRINT"
ENV_ETHERNAL = "ETHERNAL"
ENV_NETWORK = "HARDHAT_NETWORK"
ENV_RPC_URL = "RPC_URL"
ENV_ETHERNAL_WORKSPACE = "ETHERNAL_WORKSPACE"
ENV_ETHERNAL_API_TOKEN = "ETHERNAL_API_TOKEN"

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
ETHERNAL_API_URL = "https://api.tryethernal.com/api/contracts"

# Result cells longer than this are cut for display
TRUNCATE_LENGTH = 377
