"""Handles for the deployed contract and its factory."""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from eth_utils import to_checksum_address

from .abi import decode_result, encode_call
from .accounts import DeployerAccount
from .artifacts import CompiledArtifact
from .constants import DEFAULT_CONFIRMATION_TIMEOUT, DEFAULT_POLL_INTERVAL, MIN_CONFIRMATIONS
from .exceptions import ConfirmationTimeout, SubmissionError
from .rpc import JsonRpcClient, from_hex
from .types import TokenInfo, TransactionReceipt

logger = logging.getLogger(__name__)


def parse_receipt(raw: Dict[str, Any], confirmations: int = 0) -> TransactionReceipt:
    """Convert a raw JSON-RPC receipt into a TransactionReceipt."""
    contract_address = raw.get("contractAddress")
    return TransactionReceipt(
        transaction_hash=raw["transactionHash"],
        block_number=from_hex(raw["blockNumber"]),
        # Pre-Byzantium receipts have no status field
        status=from_hex(raw.get("status", "0x1")),
        gas_used=from_hex(raw["gasUsed"]),
        effective_gas_price=from_hex(raw.get("effectiveGasPrice", "0x0")),
        contract_address=to_checksum_address(contract_address) if contract_address else None,
        confirmations=confirmations,
    )


class ContractFactory:
    """Deploys a compiled artifact from a deployer account."""

    def __init__(
        self,
        rpc: JsonRpcClient,
        artifact: CompiledArtifact,
        account: DeployerAccount,
        chain_id: Optional[int] = None,
    ):
        self.rpc = rpc
        self.artifact = artifact
        self.account = account
        self.chain_id = chain_id
        self.gas_price: Optional[int] = None  # Price used by the last submission

    def estimate_deploy(self) -> int:
        """Estimate the gas needed to deploy the artifact."""
        return self.rpc.estimate_gas(
            {"from": self.account.address, "data": self.artifact.bytecode}
        )

    def deploy(self, gas_limit: int) -> str:
        """
        Submit the deployment transaction.

        Args:
            gas_limit: Gas limit for the transaction

        Returns:
            Transaction hash of the pending deployment
        """
        gas_price = self.rpc.gas_price()
        self.gas_price = gas_price

        if self.account.is_local:
            chain_id = self.chain_id if self.chain_id is not None else self.rpc.chain_id()
            transaction = {
                "nonce": self.rpc.get_transaction_count(self.account.address),
                "gasPrice": gas_price,
                "gas": gas_limit,
                "value": 0,
                "data": self.artifact.bytecode,
                "chainId": chain_id,
            }
            return self.rpc.send_raw_transaction(self.account.sign_transaction(transaction))

        return self.rpc.send_transaction(
            {
                "from": self.account.address,
                "data": self.artifact.bytecode,
                "gas": hex(gas_limit),
                "gasPrice": hex(gas_price),
            }
        )

    def wait_confirmations(
        self,
        transaction_hash: str,
        min_depth: int = MIN_CONFIRMATIONS,
        timeout: Optional[float] = DEFAULT_CONFIRMATION_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> TransactionReceipt:
        """
        Block until the transaction is mined and ``min_depth`` blocks deep.

        The inclusion block counts as the first confirmation.

        Args:
            transaction_hash: Hash returned by deploy()
            min_depth: Required confirmation depth
            timeout: Seconds to wait in total; None waits forever
            poll_interval: Seconds between polls

        Returns:
            TransactionReceipt with ``confirmations`` >= ``min_depth``

        Raises:
            SubmissionError: If the transaction was mined but reverted
            ConfirmationTimeout: If the depth is not reached within ``timeout``
        """
        deadline = None if timeout is None else clock() + timeout
        receipt: Optional[TransactionReceipt] = None

        while True:
            # Re-read every poll: a reorg can drop the transaction or move it
            raw_receipt = self.rpc.get_transaction_receipt(transaction_hash)
            if raw_receipt is None:
                if receipt is not None:
                    logger.warning(
                        "Transaction %s no longer in block %d, waiting for re-inclusion",
                        transaction_hash,
                        receipt.block_number,
                    )
                receipt = None
            else:
                current = parse_receipt(raw_receipt)
                if current.status == 0:
                    raise SubmissionError(
                        f"Deployment transaction {transaction_hash} reverted "
                        f"in block {current.block_number}"
                    )
                if receipt is None or receipt.block_number != current.block_number:
                    logger.info(
                        "Transaction %s included in block %d",
                        transaction_hash,
                        current.block_number,
                    )
                receipt = current

                head = self.rpc.block_number()
                confirmations = head - receipt.block_number + 1
                if confirmations >= min_depth:
                    return parse_receipt(raw_receipt, confirmations=confirmations)
                logger.debug(
                    "%d/%d confirmations for %s", confirmations, min_depth, transaction_hash
                )

            if deadline is not None and clock() >= deadline:
                state = "pending" if receipt is None else "under-confirmed"
                raise ConfirmationTimeout(
                    f"Transaction {transaction_hash} still {state} after {timeout}s",
                    transaction_hash=transaction_hash,
                )
            sleep(poll_interval)


class ArbContract:
    """Read-only handle on a deployed Arb contract."""

    def __init__(self, rpc: JsonRpcClient, address: str, abi: List[Dict[str, Any]]):
        self.rpc = rpc
        self.address = to_checksum_address(address)
        self.abi = abi

    def _call(self, name: str, *args: Any) -> Any:
        data = encode_call(self.abi, name, args)
        raw = self.rpc.call({"to": self.address, "data": data})
        return decode_result(self.abi, name, raw)

    @staticmethod
    def _addresses(identifiers: Sequence[str]) -> List[str]:
        return [to_checksum_address(a) for a in identifiers]

    def get_balance(self, token: str) -> int:
        return self._call("getBalance", to_checksum_address(token))

    def get_multiple_balances(self, tokens: Sequence[str]) -> List[int]:
        return list(self._call("getMultipleBalances", self._addresses(tokens)))

    def get_multiple_token_info(self, tokens: Sequence[str]) -> List[TokenInfo]:
        return [
            TokenInfo(
                address=to_checksum_address(address),
                symbol=symbol,
                decimals=decimals,
                balance=balance,
                total_supply=total_supply,
            )
            for address, symbol, decimals, balance, total_supply in self._call(
                "getMultipleTokenInfo", self._addresses(tokens)
            )
        ]

    def batch_validate_tokens(self, tokens: Sequence[str]) -> List[bool]:
        return list(self._call("batchValidateTokens", self._addresses(tokens)))

    def get_contract_info(self) -> Tuple[str, int, bool]:
        """Return (version, deployed timestamp, paused)."""
        version, deployed, paused = self._call("getContractInfo")
        return version, deployed, paused

    def owner(self) -> str:
        return to_checksum_address(self._call("owner"))

    def is_valid_token(self, token: str) -> bool:
        return self._call("isValidToken", to_checksum_address(token))
