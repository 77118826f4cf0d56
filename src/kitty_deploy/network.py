"""Network collaborators for kitty-deploy library."""

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

import requests

from .constants import CHAIN_NAMES, HARDHAT, LOCALHOST
from .exceptions import NetworkNotFoundError, RpcError
from .types import DeployedContract, TransactionHandle


class Transport(Protocol):
    """
    Submits deployments, calls and verifications.

    Implementations wrap a concrete contract toolkit. Every method raises on
    framework-level failure (bad connection, malformed call).
    """

    def deploy(
        self,
        fully_qualified_name: str,
        args: Sequence[Any],
        libraries: Mapping[str, str],
        signer: str,
    ) -> DeployedContract:
        """Deploy a contract and wait until it is mined."""
        ...

    def call(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Sequence[Any],
        signer: str,
    ) -> Optional[TransactionHandle]:
        """Send a state-changing call; None means no receipt was obtained."""
        ...

    def verify(
        self,
        address: str,
        fully_qualified_name: str,
        constructor_args: Sequence[Any],
        libraries: Mapping[str, str],
    ) -> TransactionHandle:
        """Submit source verification for a deployed contract."""
        ...


def network_name_for(name: str) -> str:
    """The in-process hardhat network reads the localhost config section."""
    return LOCALHOST if name == HARDHAT else name


class JsonRpcClient:
    """Minimal Ethereum JSON-RPC client for run-context discovery."""

    def __init__(self, rpc_url: str, timeout: int = 30):
        """
        Initialize the client.

        Args:
            rpc_url: RPC endpoint URL
            timeout: Per-request timeout in seconds
        """
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._request_id = 0

    def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Perform a JSON-RPC call.

        Args:
            method: RPC method name, e.g. "eth_accounts"
            params: Positional parameters

        Returns:
            The "result" member of the response

        Raises:
            RpcError: On HTTP errors, RPC errors or network failures
        """
        self._request_id += 1
        try:
            response = requests.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params or [],
                    "id": self._request_id,
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RpcError(f"Network error during RPC call {method}: {e}") from e

        # Check for HTTP errors
        if response.status_code != 200:
            raise RpcError(f"RPC request {method} failed with status {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            raise RpcError(f"RPC response to {method} is not JSON") from e

        # Check for RPC errors
        if "error" in result:
            raise RpcError(f"RPC error from {method}: {result['error']}")

        return result.get("result")

    def accounts(self) -> List[str]:
        """Signer addresses exposed by the node, in node order."""
        return list(self.request("eth_accounts") or [])

    def chain_id(self) -> int:
        return int(self.request("eth_chainId"), 16)

    def network_name(self) -> str:
        """
        Map the node's chain id to a scripts config network name.

        Raises:
            NetworkNotFoundError: For chain ids without a known name
        """
        chain_id = self.chain_id()
        if chain_id not in CHAIN_NAMES:
            raise NetworkNotFoundError(
                f"Unknown chain id {chain_id}; pass the network name explicitly"
            )
        return CHAIN_NAMES[chain_id]
