"""Deploy, initialize and verify runs for kitty-deploy library."""

import functools
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from .artifacts import ArtifactStore, find_abi_entry
from .config import ConfigLoader, FileConfigLoader, ScriptsConfig
from .constants import (
    DEFAULT_RPC_URL,
    ENV_CONFIG_PATH,
    ENV_ETHERNAL,
    ENV_NETWORK,
    ENV_PRINT,
    ENV_RPC_URL,
    ENV_SIGNER_INDEX,
)
from .deployments import MetadataStore
from .ethernal import push_to_ethernal
from .exceptions import ConfigError, ContractNotFoundError, FunctionNotFoundError
from .executor import LogSink, Operation, execute
from .network import JsonRpcClient, Transport, network_name_for
from .normalizer import network_actions_for, normalize
from .paths import ScriptPaths, directory_has_files, get_script_paths
from .reporting import (
    COMPLETION_MESSAGES,
    PREVIEW_HEADERS,
    PREVIEW_TITLES,
    RESULT_HEADERS,
    RESULT_TITLES,
    LogReporter,
    Reporter,
    preview,
)
from .resolver import resolve_action
from .types import (
    ActionKind,
    DeploymentRecord,
    Result,
    StrictDeploy,
    StrictInitialize,
    StrictVerify,
)

logger = logging.getLogger(__name__)

ReporterFactory = Callable[[str, Sequence[str]], Reporter]


@dataclass
class RunContext:
    """Everything a run needs, built once and passed explicitly."""

    network_name: str
    paths: ScriptPaths
    config: ScriptsConfig
    transport: Transport
    signers: List[str] = field(default_factory=list)
    signer_index: int = 0
    store: Optional[MetadataStore] = None
    artifacts: Optional[ArtifactStore] = None
    reporter_factory: Optional[ReporterFactory] = None
    ethernal: bool = False
    byo_addresses: bool = False
    build: Optional[Callable[[], None]] = None

    def __post_init__(self):
        if self.store is None:
            self.store = MetadataStore(self.paths)
        if self.artifacts is None:
            self.artifacts = ArtifactStore(self.paths.artifacts)

    @property
    def signer(self) -> str:
        """
        Address that signs deployments and calls.

        Raises:
            ConfigError: If signer_index is outside the available signers
        """
        if not 0 <= self.signer_index < len(self.signers):
            raise ConfigError(
                f"Signer index {self.signer_index} out of range ({len(self.signers)} signers)"
            )
        return self.signers[self.signer_index]


def deploy_single_contract(
    ctx: RunContext, action: StrictDeploy, record: Optional[DeploymentRecord], log: LogSink
) -> Result:
    """Resolve references, deploy, and record the deployment in the metadata store."""
    resolved = resolve_action(action, ctx.store, ctx.signers, log)

    try:
        deployed = ctx.transport.deploy(
            resolved.fully_qualified_name,
            resolved.args.args,
            resolved.libraries,
            ctx.signer,
        )
    except Exception as e:
        error = f"Error deploying contract: {e}"
        log.error(error)
        return Result(contract_name=action.contract_name, error=error)

    new_record = DeploymentRecord(
        contract_name=resolved.contract_name,
        source_path=resolved.file_path,
        args=resolved.args,
        libraries=resolved.libraries,
        abi=json.dumps(deployed.abi),
        build_time=datetime.now(timezone.utc).isoformat(),
        network=ctx.network_name,
        tx_hash=deployed.transaction.hash,
        address=deployed.address,
    )
    ctx.store.save(new_record)

    if ctx.ethernal:
        push_to_ethernal(resolved.contract_name, deployed.address, deployed.abi, log=log)

    return Result(
        contract_name=action.contract_name,
        transaction=deployed.transaction,
        record=new_record,
    )


def call_single_function(
    ctx: RunContext, action: StrictInitialize, record: Optional[DeploymentRecord], log: LogSink
) -> Result:
    """Call the configured function on a deployed contract and wait for the receipt."""
    if record is None:
        raise ContractNotFoundError(f"Metadata not found for contract {action.contract_name}")

    abi = record.abi_entries()
    if find_abi_entry(abi, "function", action.function_name) is None:
        raise FunctionNotFoundError(
            f"Function {action.function_name} not found on contract {action.contract_name}"
        )

    resolved = resolve_action(action, ctx.store, ctx.signers, log)
    result = Result(contract_name=action.contract_name, record=record)
    try:
        transaction = ctx.transport.call(
            record.address, abi, action.function_name, resolved.args.args, ctx.signer
        )
    except Exception as e:
        result.error = f"Error calling function: {e}"
        log.error(result.error)
        return result

    if transaction is None:
        result.error = "Transaction receipt is null"
    else:
        result.transaction = transaction
    return result


def verify_single_contract(
    ctx: RunContext, action: StrictVerify, record: Optional[DeploymentRecord], log: LogSink
) -> Result:
    """Submit the recorded deployment for source verification."""
    if record is None:
        raise ContractNotFoundError(f"Metadata not found for contract {action.contract_name}")

    handle = ctx.transport.verify(
        record.address,
        f"{record.source_path}:{record.contract_name}",
        record.args.args,
        record.libraries,
    )
    log.info("Verification submitted for %s at %s", record.contract_name, record.address)
    return Result(contract_name=action.contract_name, transaction=handle, record=record)


def _run(
    ctx: RunContext,
    kind: ActionKind,
    operation: Operation,
    with_store: bool,
    show_preview: bool = True,
) -> List[Result]:
    loose = network_actions_for(kind, ctx.config.for_network(ctx.network_name))
    actions = normalize(kind, loose, paths=ctx.paths, artifacts=ctx.artifacts, store=ctx.store)

    reporter = None
    if ctx.reporter_factory is not None:
        if show_preview:
            preview(ctx.reporter_factory(PREVIEW_TITLES[kind], PREVIEW_HEADERS[kind]), actions)
        reporter = ctx.reporter_factory(RESULT_TITLES[kind], RESULT_HEADERS[kind])

    results = execute(
        actions,
        functools.partial(operation, ctx),
        ctx.store if with_store else None,
        reporter,
    )
    failed = sum(1 for result in results if not result.succeeded)
    logger.info("%s %d succeeded, %d failed.", COMPLETION_MESSAGES[kind], len(results) - failed, failed)
    return results


def _rebuild(ctx: RunContext) -> None:
    if ctx.build is not None:
        ctx.build()
        ctx.artifacts = ArtifactStore(ctx.paths.artifacts)


def deploy(ctx: RunContext, archive: bool = True) -> List[Result]:
    """
    Deploy every contract in the network's deploy list, in order.

    Previous deployments (and build outputs) are archived first so each run
    starts from an empty deployments directory. Archiving removes the
    artifacts, so it needs ctx.build to compile them again.

    Args:
        ctx: Run context
        archive: Snapshot and clear previous deployments before deploying

    Returns:
        One Result per deploy action

    Raises:
        ConfigError: If previous deployments would be archived but no build hook is set
    """
    if archive:
        if ctx.build is None and directory_has_files(ctx.paths.deployments):
            raise ConfigError(
                f"Deployments in {ctx.paths.deployments} would be archived together with "
                "the artifacts, but no build hook is set to recompile them; pass build=..., "
                "deploy with archive=False, or use quick_deploy"
            )
        ctx.store.archive()

    _rebuild(ctx)
    return _run(ctx, ActionKind.DEPLOY, deploy_single_contract, with_store=False)


def quick_deploy(ctx: RunContext) -> List[Result]:
    """
    Deploy the network's deploy list without archiving or a preview table.

    Existing records stay in place; a contract deployed again overwrites its
    own record.

    Returns:
        One Result per deploy action
    """
    _rebuild(ctx)
    return _run(ctx, ActionKind.DEPLOY, deploy_single_contract, with_store=False, show_preview=False)


def initialize(ctx: RunContext) -> List[Result]:
    """Call every function in the network's initialize list against recorded deployments."""
    ctx.store.load_all(ctx.network_name, ctx.byo_addresses)
    return _run(ctx, ActionKind.INITIALIZE, call_single_function, with_store=True)


def verify(ctx: RunContext) -> List[Result]:
    """Submit verification for the network's verify list (or every record for ["ALL"])."""
    ctx.store.load_all(ctx.network_name, ctx.byo_addresses)
    return _run(ctx, ActionKind.VERIFY, verify_single_contract, with_store=True)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() == "true"


def build_context(
    transport: Transport,
    root: Optional[Union[Path, str]] = None,
    config_path: Optional[Union[Path, str]] = None,
    network_name: Optional[str] = None,
    rpc_url: Optional[str] = None,
    signer_index: Optional[int] = None,
    print_table: Optional[bool] = None,
    ethernal: Optional[bool] = None,
    byo_addresses: bool = False,
    build: Optional[Callable[[], None]] = None,
    config_loader: Optional[ConfigLoader] = None,
) -> RunContext:
    """
    Assemble a RunContext, falling back to environment variables.

    Args:
        transport: Contract transport used for every submission
        root: Project root (defaults to the working directory)
        config_path: Scripts config file (defaults to $KIT_CONFIG, then the default candidates)
        network_name: Config section to run (defaults to $HARDHAT_NETWORK, then the node's chain id)
        rpc_url: Node URL for signer and chain discovery (defaults to $RPC_URL, then localhost:8545)
        signer_index: Index of the signing account (defaults to $SIGNERINDEX, then 0)
        print_table: Report preview/result rows (defaults to $PRINT == "true")
        ethernal: Push deployed ABIs to Ethernal (defaults to $ETHERNAL == "true")
        byo_addresses: Override stored addresses from deploymentAddresses.*
        build: Compile hook run after archiving, before deploy normalization
        config_loader: Alternative source for the scripts config

    Returns:
        Ready-to-run context

    Raises:
        ConfigNotFoundError: If no scripts config is found
        RpcError: If the node cannot be reached
    """
    paths = get_script_paths(root)

    if rpc_url is None:
        rpc_url = os.environ.get(ENV_RPC_URL, DEFAULT_RPC_URL)
    client = JsonRpcClient(rpc_url)

    if network_name is None:
        network_name = os.environ.get(ENV_NETWORK) or client.network_name()
    if signer_index is None:
        signer_index = int(os.environ.get(ENV_SIGNER_INDEX) or "0")
    if print_table is None:
        print_table = _env_flag(ENV_PRINT)
    if ethernal is None:
        ethernal = _env_flag(ENV_ETHERNAL)
    if config_path is None:
        config_path = os.environ.get(ENV_CONFIG_PATH) or None

    loader = config_loader or FileConfigLoader(paths.root)

    return RunContext(
        network_name=network_name_for(network_name),
        paths=paths,
        config=loader.load(config_path),
        transport=transport,
        signers=client.accounts(),
        signer_index=signer_index,
        reporter_factory=LogReporter if print_table else None,
        ethernal=ethernal,
        byo_addresses=byo_addresses,
        build=build,
    )
