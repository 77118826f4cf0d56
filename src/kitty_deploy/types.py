"""Data types and dataclasses for kitty-deploy library."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union


class ActionKind(Enum):
    """
    Action kinds, one per section of a network's scripts config.

    Value strings match the config section names.
    """

    DEPLOY = "deploy"
    INITIALIZE = "initialize"
    VERIFY = "verify"


class ActionState(Enum):
    """Lifecycle of a single action inside an execution run."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ArgumentRecord:
    """Positional call arguments plus ABI names/types kept for display."""

    args: List[Any] = field(default_factory=list)  # ArgumentTree, may nest
    arg_names: List[str] = field(default_factory=list)
    arg_sigs: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"args": self.args, "argNames": self.arg_names, "argSigs": self.arg_sigs}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArgumentRecord":
        return cls(
            args=list(data.get("args") or []),
            arg_names=list(data.get("argNames") or []),
            arg_sigs=list(data.get("argSigs") or []),
        )


@dataclass(frozen=True)
class StrictDeploy:
    """Fully populated deploy action."""

    kind: ClassVar[ActionKind] = ActionKind.DEPLOY

    contract_name: str
    file_path: str  # e.g., "contracts/HelloWorld.sol"
    fully_qualified_name: str  # e.g., "contracts/HelloWorld.sol:HelloWorld"
    args: ArgumentRecord
    libraries: Dict[str, str]


@dataclass(frozen=True)
class StrictInitialize:
    """Fully populated function-call action against a deployed contract."""

    kind: ClassVar[ActionKind] = ActionKind.INITIALIZE

    contract_name: str
    function_name: str
    args: ArgumentRecord
    address: str  # Deployed address, or the CONTRACT_NOT_FOUND sentinel


@dataclass(frozen=True)
class StrictVerify:
    """Verification action replaying what was recorded at deploy time."""

    kind: ClassVar[ActionKind] = ActionKind.VERIFY

    contract_name: str
    file_path: str
    fully_qualified_name: str
    address: str
    args: ArgumentRecord
    libraries: Dict[str, str]


StrictAction = Union[StrictDeploy, StrictInitialize, StrictVerify]


@dataclass
class DeploymentRecord:
    """
    Persisted metadata for one deployed contract.

    Serialized to deployments/<contract_name>.json with camelCase keys.
    """

    contract_name: str
    source_path: str
    args: ArgumentRecord
    libraries: Dict[str, str]
    abi: str  # JSON-encoded ABI
    build_time: str  # ISO 8601 UTC
    network: str
    tx_hash: str
    address: str

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "contractName": self.contract_name,
            "sourcePath": self.source_path,
            "args": self.args.to_dict(),
            "libraries": self.libraries,
            "abi": self.abi,
            "buildTime": self.build_time,
            "network": self.network,
            "txHash": self.tx_hash,
            "address": self.address,
        }

    @classmethod
    def from_json_dict(cls, data: Dict[str, Any]) -> "DeploymentRecord":
        return cls(
            contract_name=data["contractName"],
            source_path=data["sourcePath"],
            args=ArgumentRecord.from_dict(data.get("args") or {}),
            libraries=dict(data.get("libraries") or {}),
            abi=data.get("abi", "[]"),
            build_time=data.get("buildTime", ""),
            network=data.get("network", ""),
            tx_hash=data.get("txHash", ""),
            address=data["address"],
        )

    def abi_entries(self) -> List[Dict[str, Any]]:
        """Decode the stored ABI string."""
        return json.loads(self.abi) if self.abi else []


@dataclass
class TransactionHandle:
    """Reference to a submitted transaction or verification request."""

    hash: str
    details: Dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        return json.dumps({"hash": self.hash, **self.details}, default=str)


@dataclass
class DeployedContract:
    """What a transport returns after a successful deployment."""

    address: str
    abi: List[Dict[str, Any]]
    transaction: TransactionHandle


@dataclass
class Result:
    """Outcome of one action; exactly one of transaction/error is set on completion."""

    contract_name: str
    transaction: Optional[TransactionHandle] = None
    error: Optional[str] = None
    record: Optional[DeploymentRecord] = None
    logs: List[str] = field(default_factory=list)
    state: ActionState = ActionState.PENDING

    @property
    def succeeded(self) -> bool:
        return self.state is ActionState.SUCCEEDED
