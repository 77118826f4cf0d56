"""Conversion of loose config actions into strict, self-contained actions."""

import copy
import logging
from typing import Any, List, Optional, Sequence, Union

from .artifacts import ArtifactStore, extract_arg_names_and_sigs
from .config import ArgumentInput, DeployInput, InitializeInput
from .constants import CONTRACT_NOT_FOUND, VERIFY_ALL
from .deployments import MetadataStore
from .exceptions import ConfigError, ContractNotFoundError
from .paths import ScriptPaths, find_contract_source
from .types import (
    ActionKind,
    ArgumentRecord,
    DeploymentRecord,
    StrictAction,
    StrictDeploy,
    StrictInitialize,
    StrictVerify,
)

logger = logging.getLogger(__name__)


def _coerce(model: Any, item: Any) -> Any:
    return model.model_validate(item) if isinstance(item, dict) else item


def _argument_record(
    loose: Optional[ArgumentInput],
    names: List[str],
    sigs: List[str],
    target: Optional[str] = None,
) -> ArgumentRecord:
    """
    Copy the authored args and attach the ABI parameter names/types.

    Args:
        loose: Authored argument block, if any
        names: Parameter names from the ABI entry
        sigs: Parameter types from the ABI entry
        target: Description of the ABI entry (e.g., "HelloWorld constructor");
            None when no entry was found, which skips the count check

    Raises:
        ConfigError: If the number of args differs from the number of parameters
    """
    args = copy.deepcopy(loose.args) if loose is not None else []
    if target is not None and len(args) != len(names):
        raise ConfigError(
            f"{target} expects {len(names)} argument(s) but the config gives {len(args)}"
        )
    return ArgumentRecord(args=args, arg_names=names, arg_sigs=sigs)


def to_strict_deploy(
    deploy_inputs: Sequence[DeployInput], paths: ScriptPaths, artifacts: ArtifactStore
) -> List[StrictDeploy]:
    """
    Populate file path, fully qualified name, libraries and argument metadata.

    Args:
        deploy_inputs: Loose deploy actions from the scripts config
        paths: Project layout (contract sources are searched under paths.sources)
        artifacts: Compiled artifacts, for constructor parameter names/types

    Returns:
        One StrictDeploy per input, in the same order

    Raises:
        ContractNotFoundError: If a source file cannot be located
        ArtifactNotFoundError: If a contract has not been compiled
        ConfigError: If the args do not match the constructor parameters
    """
    strict: List[StrictDeploy] = []
    for item in deploy_inputs:
        loose = _coerce(DeployInput, item)
        file_path = loose.file_path or find_contract_source(paths, loose.contract_name)
        fully_qualified_name = loose.fully_qualified_name or f"{file_path}:{loose.contract_name}"
        names, sigs = artifacts.constructor_inputs(fully_qualified_name)

        strict.append(
            StrictDeploy(
                contract_name=loose.contract_name,
                file_path=file_path,
                fully_qualified_name=fully_qualified_name,
                args=_argument_record(loose.args, names, sigs, f"{loose.contract_name} constructor"),
                libraries=dict(loose.libraries or {}),
            )
        )
    return strict


def to_strict_initialize(
    initialize_inputs: Sequence[InitializeInput],
    artifacts: ArtifactStore,
    store: MetadataStore,
) -> List[StrictInitialize]:
    """
    Attach the deployed address and function parameter metadata to each call.

    A contract missing from the store gets the CONTRACT_NOT_FOUND sentinel as
    its address; the failure surfaces when the action executes. The ABI is
    looked up by the recorded source path when a record exists.

    Raises:
        ConfigError: If the args do not match a function found in the ABI
    """
    strict: List[StrictInitialize] = []
    for item in initialize_inputs:
        loose = _coerce(InitializeInput, item)
        record = store.get(loose.contract_name)
        if record is None:
            logger.warning("No deployment record for %s", loose.contract_name)
        artifact_name = loose.contract_name
        if record is not None:
            artifact_name = f"{record.source_path}:{loose.contract_name}"
        entry = artifacts.function_entry(artifact_name, loose.function_name)
        names, sigs = extract_arg_names_and_sigs(entry)
        # An unknown function fails later, when the call is executed
        target = f"{loose.contract_name}.{loose.function_name}" if entry is not None else None

        strict.append(
            StrictInitialize(
                contract_name=loose.contract_name,
                function_name=loose.function_name,
                args=_argument_record(loose.args, names, sigs, target),
                address=record.address if record is not None else CONTRACT_NOT_FOUND,
            )
        )
    return strict


def _verify_from_record(record: DeploymentRecord) -> StrictVerify:
    return StrictVerify(
        contract_name=record.contract_name,
        file_path=record.source_path,
        fully_qualified_name=f"{record.source_path}:{record.contract_name}",
        address=record.address,
        args=copy.deepcopy(record.args),
        libraries=dict(record.libraries),
    )


def to_strict_verify(contract_names: Sequence[str], store: MetadataStore) -> List[StrictVerify]:
    """
    Build verification actions by replaying stored deployment records.

    Args:
        contract_names: Contract names, or ["ALL"] for every record in the store
        store: Metadata store populated for the active network

    Raises:
        ContractNotFoundError: If a named contract has no deployment record
    """
    if list(contract_names) == [VERIFY_ALL]:
        return [_verify_from_record(record) for record in store.records()]

    strict: List[StrictVerify] = []
    for contract_name in contract_names:
        record = store.get(contract_name)
        if record is None:
            raise ContractNotFoundError(
                f"Contract {contract_name} has no deployment record in {store.deployments_dir}"
            )
        strict.append(_verify_from_record(record))
    return strict


def normalize(
    kind: Union[ActionKind, str],
    loose_actions: Sequence[Any],
    *,
    paths: ScriptPaths,
    artifacts: ArtifactStore,
    store: MetadataStore,
) -> List[StrictAction]:
    """
    Convert one network's loose action list into strict actions.

    Args:
        kind: "deploy", "initialize" or "verify"
        loose_actions: The matching list from NetworkActions
        paths: Project layout
        artifacts: Compiled artifacts
        store: Metadata store (read for initialize/verify)

    Raises:
        ValueError: For an unknown kind
    """
    match ActionKind(kind):
        case ActionKind.DEPLOY:
            return list(to_strict_deploy(loose_actions, paths, artifacts))
        case ActionKind.INITIALIZE:
            return list(to_strict_initialize(loose_actions, artifacts, store))
        case ActionKind.VERIFY:
            return list(to_strict_verify(loose_actions, store))
        case _:
            # Unreachable but exhaustive
            raise ValueError(f"Unknown action kind: {kind}")


def network_actions_for(kind: Union[ActionKind, str], network_actions: Any) -> List[Any]:
    """Pick the loose list for a kind out of a NetworkActions section."""
    return list(getattr(network_actions, ActionKind(kind).value))

