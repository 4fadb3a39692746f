"""JSON-RPC transport for arb-deployments library."""

import itertools
import logging
from typing import Any, Dict, List, Optional

import requests

from .constants import RPC_TIMEOUT
from .exceptions import RpcError

logger = logging.getLogger(__name__)


def from_hex(value: Optional[str]) -> Optional[int]:
    """Parse a JSON-RPC quantity ("0x1a") into an int. None stays None."""
    if value is None:
        return None
    return int(value, 16)


class JsonRpcClient:
    """Minimal Ethereum JSON-RPC client over HTTP."""

    def __init__(self, url: str, timeout: float = RPC_TIMEOUT):
        """
        Initialize the client.

        Args:
            url: RPC endpoint URL
            timeout: Per-request timeout in seconds
        """
        self.url = url
        self.timeout = timeout
        self._ids = itertools.count(1)

    def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Send one JSON-RPC request and return its ``result`` member.

        Args:
            method: JSON-RPC method name (e.g., "eth_blockNumber")
            params: Positional parameters

        Returns:
            The decoded ``result`` value

        Raises:
            RpcError: On network errors, non-200 responses or JSON-RPC errors
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }
        logger.debug("RPC %s %s", method, payload["params"])

        try:
            response = requests.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise RpcError(f"Network error during {method}: {e}") from e

        # Check for HTTP errors
        if response.status_code != 200:
            raise RpcError(f"{method} failed with HTTP status {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            raise RpcError(f"{method} returned a non-JSON response") from e

        # Check for RPC errors
        if "error" in result:
            error = result["error"] or {}
            raise RpcError(
                f"RPC error in {method}: {error.get('message', error)}",
                code=error.get("code"),
                data=error.get("data"),
            )

        if "result" not in result:
            raise RpcError(f"{method} response is missing 'result'")

        return result["result"]

    # Chain state

    def chain_id(self) -> int:
        return from_hex(self.request("eth_chainId"))

    def block_number(self) -> int:
        return from_hex(self.request("eth_blockNumber"))

    def gas_price(self) -> int:
        return from_hex(self.request("eth_gasPrice"))

    def get_balance(self, address: str, block: str = "latest") -> int:
        return from_hex(self.request("eth_getBalance", [address, block]))

    def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return from_hex(self.request("eth_getTransactionCount", [address, block]))

    def accounts(self) -> List[str]:
        return self.request("eth_accounts") or []

    # Calls and transactions

    def estimate_gas(self, transaction: Dict[str, Any]) -> int:
        return from_hex(self.request("eth_estimateGas", [transaction]))

    def call(self, transaction: Dict[str, Any], block: str = "latest") -> str:
        return self.request("eth_call", [transaction, block])

    def send_transaction(self, transaction: Dict[str, Any]) -> str:
        return self.request("eth_sendTransaction", [transaction])

    def send_raw_transaction(self, raw_transaction: str) -> str:
        return self.request("eth_sendRawTransaction", [raw_transaction])

    def get_transaction_receipt(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a transaction receipt.

        Returns:
            Raw receipt dict, or None while the transaction is still pending
        """
        return self.request("eth_getTransactionReceipt", [transaction_hash])
