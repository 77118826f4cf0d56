"""Reference token resolution for kitty-deploy library.

Argument trees may contain placeholder strings for values that are only known
once earlier actions have run:

    "HelloWorld.address"  -> address recorded for HelloWorld in the metadata store
    "SIGNER[0]"           -> address of the first available signer

Unresolvable references become sentinel strings instead of raising, so the
action still runs and fails on-chain with an obviously wrong value.
"""

import dataclasses
import logging
from typing import Any, Dict, List, Mapping, Sequence, Union

from .constants import (
    ADDRESS_REFERENCE_RE,
    CONTRACT_NOT_FOUND,
    SIGNER_OUT_OF_BOUNDS,
    SIGNER_REFERENCE_RE,
)
from .types import StrictDeploy, StrictInitialize

logger = logging.getLogger(__name__)


def resolve_leaf(
    value: Any,
    store: Any,
    signers: Sequence[str],
    log: Union[logging.Logger, logging.LoggerAdapter] = logger,
) -> Any:
    """
    Resolve a single leaf; anything that is not a reference token passes through.

    Args:
        value: Leaf value
        store: MetadataStore or mapping of contract name -> DeploymentRecord
        signers: Ordered signer addresses
        log: Where to report sentinel substitutions

    Returns:
        The resolved address, a sentinel string, or the value unchanged
    """
    if not isinstance(value, str):
        return value

    match = ADDRESS_REFERENCE_RE.match(value)
    if match:
        record = store.get(match.group("name"))
        if record is None:
            log.warning("Unresolved reference %s: %s", value, CONTRACT_NOT_FOUND)
            return CONTRACT_NOT_FOUND
        return record.address

    match = SIGNER_REFERENCE_RE.match(value)
    if match:
        try:
            index = int(match.group("index"))
        except ValueError:
            index = -1
        if 0 <= index < len(signers):
            return signers[index]
        log.warning("Unresolved reference %s: %s", value, SIGNER_OUT_OF_BOUNDS)
        return SIGNER_OUT_OF_BOUNDS

    return value


def resolve_args(
    args: Sequence[Any],
    store: Any,
    signers: Sequence[str],
    log: Union[logging.Logger, logging.LoggerAdapter] = logger,
) -> List[Any]:
    """
    Depth-first substitution of reference tokens in an argument tree.

    Returns a new tree; the input is left untouched. Never raises for
    unresolvable references.
    """
    resolved: List[Any] = []
    for item in args:
        if isinstance(item, (list, tuple)):
            resolved.append(resolve_args(item, store, signers, log))
        else:
            resolved.append(resolve_leaf(item, store, signers, log))
    return resolved


def resolve_libraries(
    libraries: Mapping[str, str],
    store: Any,
    log: Union[logging.Logger, logging.LoggerAdapter] = logger,
) -> Dict[str, str]:
    """Resolve "<name>.address" library links; other values pass through."""
    resolved: Dict[str, str] = {}
    for library_name, address in libraries.items():
        match = ADDRESS_REFERENCE_RE.match(str(address))
        if not match:
            resolved[library_name] = address
            continue
        record = store.get(match.group("name"))
        if record is None:
            log.warning("Unresolved library %s -> %s: %s", library_name, address, CONTRACT_NOT_FOUND)
            resolved[library_name] = CONTRACT_NOT_FOUND
        else:
            resolved[library_name] = record.address
    return resolved


def resolve_action(
    action: Union[StrictDeploy, StrictInitialize],
    store: Any,
    signers: Sequence[str],
    log: Union[logging.Logger, logging.LoggerAdapter] = logger,
) -> Union[StrictDeploy, StrictInitialize]:
    """
    Return a copy of a deploy or initialize action with its references resolved.

    Raises:
        TypeError: For action types that carry no references (e.g., StrictVerify)
    """
    if not isinstance(action, (StrictDeploy, StrictInitialize)):
        raise TypeError(f"Cannot resolve references for {type(action).__name__}")

    args = dataclasses.replace(action.args, args=resolve_args(action.args.args, store, signers, log))
    if isinstance(action, StrictDeploy):
        return dataclasses.replace(
            action, args=args, libraries=resolve_libraries(action.libraries, store, log)
        )
    return dataclasses.replace(action, args=args)
