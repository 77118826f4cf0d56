"""Optional upload of deployed contract ABIs to the Ethernal block explorer."""

import logging
import os
from typing import Any, Dict, List, Optional

import requests

from .constants import ENV_ETHERNAL_API_TOKEN, ENV_ETHERNAL_WORKSPACE, ETHERNAL_API_URL

logger = logging.getLogger(__name__)


def push_to_ethernal(
    name: str,
    address: str,
    abi: List[Dict[str, Any]],
    workspace: Optional[str] = None,
    api_token: Optional[str] = None,
    log: Any = logger,
) -> bool:
    """
    Register a contract with Ethernal so its calls decode in the explorer.

    Failures are logged and never raised; a deployment does not depend on it.

    Args:
        name: Contract name
        address: Deployed address
        abi: Contract ABI
        workspace: Ethernal workspace (defaults to $ETHERNAL_WORKSPACE)
        api_token: API token (defaults to $ETHERNAL_API_TOKEN)
        log: Logger or LogSink receiving failure messages

    Returns:
        True if Ethernal accepted the contract
    """
    if workspace is None:
        workspace = os.environ.get(ENV_ETHERNAL_WORKSPACE)
    if api_token is None:
        api_token = os.environ.get(ENV_ETHERNAL_API_TOKEN)

    try:
        response = requests.post(
            f"{ETHERNAL_API_URL}/{address}",
            json={"data": {"workspace": workspace, "name": name, "abi": abi}},
            headers={
                "Authorization": f"Bearer {api_token}",
                "Content-Type": "application/json",
            },
            timeout=30,
        )
    except requests.RequestException as e:
        log.error("Failed to push to Ethernal: %s. Error: %s.", name, e)
        return False

    if not response.ok:
        log.error(
            "Failed to push to Ethernal: %s. Status code: %s - %s.",
            name,
            response.status_code,
            response.reason,
        )
        return False

    return True
