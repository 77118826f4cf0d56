"""Shared pytest fixtures for kitty-deploy tests."""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pytest

from kitty_deploy.artifacts import ArtifactStore
from kitty_deploy.deployments import MetadataStore
from kitty_deploy.paths import ScriptPaths, get_script_paths
from kitty_deploy.types import ArgumentRecord, DeployedContract, DeploymentRecord, TransactionHandle

SIGNERS = [
    "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
    "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
]

HELLO_WORLD_ABI: List[Dict[str, Any]] = [
    {
        "type": "constructor",
        "inputs": [
            {"name": "greeting", "type": "string"},
            {"name": "count", "type": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "initialize",
        "inputs": [
            {"name": "greeting", "type": "string"},
            {"name": "count", "type": "uint256"},
        ],
        "outputs": [],
    },
    {"type": "function", "name": "sayHello", "inputs": [], "outputs": [{"name": "", "type": "string"}]},
]

CONFIG_SHOWCASE_ABI: List[Dict[str, Any]] = [
    {
        "type": "constructor",
        "inputs": [
            {"name": "helloWorld", "type": "address"},
            {"name": "owner", "type": "address"},
            {"name": "label", "type": "string"},
            {"name": "version", "type": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "initialize",
        "inputs": [
            {"name": "helloWorld", "type": "address"},
            {"name": "owner", "type": "address"},
            {"name": "label", "type": "string"},
            {"name": "version", "type": "uint256"},
        ],
        "outputs": [],
    },
]

MATH_LIB_ABI: List[Dict[str, Any]] = [
    {"type": "function", "name": "add", "inputs": [{"name": "a", "type": "uint256"}, {"name": "b", "type": "uint256"}]},
]


def write_artifact(artifacts_dir: Path, source_name: str, contract_name: str, abi: List[Dict[str, Any]]) -> Path:
    """Write a hardhat-style artifact (plus its debug file) and return its path."""
    artifact_dir = artifacts_dir / source_name
    artifact_dir.mkdir(parents=True, exist_ok=True)
    artifact_path = artifact_dir / f"{contract_name}.json"
    artifact_path.write_text(
        json.dumps(
            {
                "_format": "hh-sol-artifact-1",
                "contractName": contract_name,
                "sourceName": source_name,
                "abi": abi,
                "bytecode": "0x6080",
            }
        )
    )
    (artifact_dir / f"{contract_name}.dbg.json").write_text(json.dumps({"buildInfo": "../build-info/x.json"}))
    return artifact_path


def make_record(
    contract_name: str,
    address: str,
    source_path: Optional[str] = None,
    args: Optional[List[Any]] = None,
    libraries: Optional[Dict[str, str]] = None,
    abi: Optional[List[Dict[str, Any]]] = None,
) -> DeploymentRecord:
    return DeploymentRecord(
        contract_name=contract_name,
        source_path=source_path or f"contracts/{contract_name}.sol",
        args=ArgumentRecord(args=list(args or []), arg_names=[], arg_sigs=[]),
        libraries=dict(libraries or {}),
        abi=json.dumps(abi or []),
        build_time="2024-01-01T00:00:00+00:00",
        network="localhost",
        tx_hash="0x" + "ab" * 32,
        address=address,
    )


class FakeTransport:
    """In-memory transport: deterministic addresses, optional scripted failures."""

    def __init__(self):
        self.deployed: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Dict[str, Any]] = []
        self.verified: List[Dict[str, Any]] = []
        self.raise_on: Dict[str, Exception] = {}
        self.no_receipt: set = set()
        self.abis: Dict[str, List[Dict[str, Any]]] = {
            "HelloWorld": HELLO_WORLD_ABI,
            "ConfigShowcase": CONFIG_SHOWCASE_ABI,
            "MathLib": MATH_LIB_ABI,
        }
        self._nonce = 0

    def _next_hash(self) -> str:
        self._nonce += 1
        return "0x" + f"{self._nonce:064x}"

    def deploy(self, fully_qualified_name: str, args: Sequence[Any], libraries: Mapping[str, str], signer: str) -> DeployedContract:
        contract_name = fully_qualified_name.rpartition(":")[2]
        if contract_name in self.raise_on:
            raise self.raise_on[contract_name]
        address = "0x" + f"{len(self.deployed) + 1:040x}"
        self.deployed[address] = {
            "name": contract_name,
            "fqn": fully_qualified_name,
            "args": list(args),
            "libraries": dict(libraries),
            "signer": signer,
            "state": {"greeting": args[0] if args else None},
        }
        return DeployedContract(
            address=address,
            abi=self.abis.get(contract_name, []),
            transaction=TransactionHandle(hash=self._next_hash(), details={"from": signer}),
        )

    def call(self, address: str, abi: List[Dict[str, Any]], function_name: str, args: Sequence[Any], signer: str) -> Optional[TransactionHandle]:
        contract = self.deployed.get(address)
        if contract is None:
            raise ValueError(f"no contract at {address}")
        if contract["name"] in self.raise_on:
            raise self.raise_on[contract["name"]]
        self.calls.append({"address": address, "function": function_name, "args": list(args), "signer": signer})
        if contract["name"] in self.no_receipt:
            return None
        if function_name == "initialize" and args:
            contract["state"]["greeting"] = args[0]
        return TransactionHandle(hash=self._next_hash(), details={"to": address})

    def verify(self, address: str, fully_qualified_name: str, constructor_args: Sequence[Any], libraries: Mapping[str, str]) -> TransactionHandle:
        contract_name = fully_qualified_name.rpartition(":")[2]
        if contract_name in self.raise_on:
            raise self.raise_on[contract_name]
        self.verified.append(
            {
                "address": address,
                "fqn": fully_qualified_name,
                "args": list(constructor_args),
                "libraries": dict(libraries),
            }
        )
        return TransactionHandle(hash=f"guid-{len(self.verified)}", details={"status": "submitted"})

    def greeting(self, address: str) -> Any:
        return self.deployed[address]["state"]["greeting"]


@pytest.fixture
def signers() -> List[str]:
    return list(SIGNERS)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project with two contract sources and their compiled artifacts."""
    root = tmp_path / "project"
    (root / "contracts" / "showcase").mkdir(parents=True)
    (root / "contracts" / "HelloWorld.sol").write_text("contract HelloWorld {}\n")
    (root / "contracts" / "showcase" / "ConfigShowcase.sol").write_text("contract ConfigShowcase {}\n")
    (root / "contracts" / "MathLib.sol").write_text("library MathLib {}\n")

    artifacts = root / "artifacts"
    write_artifact(artifacts, "contracts/HelloWorld.sol", "HelloWorld", HELLO_WORLD_ABI)
    write_artifact(artifacts, "contracts/showcase/ConfigShowcase.sol", "ConfigShowcase", CONFIG_SHOWCASE_ABI)
    write_artifact(artifacts, "contracts/MathLib.sol", "MathLib", MATH_LIB_ABI)
    (artifacts / "build-info").mkdir()
    (artifacts / "build-info" / "HelloWorld.json").write_text("{}")
    return root


@pytest.fixture
def script_paths(project_root: Path) -> ScriptPaths:
    return get_script_paths(project_root)


@pytest.fixture
def artifact_store(script_paths: ScriptPaths) -> ArtifactStore:
    return ArtifactStore(script_paths.artifacts)


@pytest.fixture
def metadata_store(script_paths: ScriptPaths) -> MetadataStore:
    return MetadataStore(script_paths)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()
