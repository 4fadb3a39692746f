"""Deployer identity resolution for arb-deployments library."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from eth_account import Account
from eth_utils import encode_hex, to_checksum_address

from .exceptions import SubmissionError
from .rpc import JsonRpcClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeployerAccount:
    """Account that signs the deployment.

    With a private key, transactions are signed locally and sent raw.
    Without one, the node signs with its own unlocked account.
    """

    address: str
    private_key: Optional[str] = field(default=None, repr=False)

    @property
    def is_local(self) -> bool:
        return self.private_key is not None

    def sign_transaction(self, transaction: Dict[str, Any]) -> str:
        """
        Sign a transaction with the local key.

        Returns:
            Hex-encoded raw transaction for ``eth_sendRawTransaction``
        """
        if self.private_key is None:
            raise SubmissionError(f"No local key for {self.address}; cannot sign")
        signed = Account.sign_transaction(transaction, self.private_key)
        return encode_hex(signed.raw_transaction)


def resolve_account(rpc: JsonRpcClient, private_key: Optional[str] = None) -> DeployerAccount:
    """
    Resolve the deploying account.

    Args:
        rpc: Client for the target network
        private_key: Hex private key; if None, the node's first account is used

    Returns:
        DeployerAccount

    Raises:
        SubmissionError: If the key is invalid or the node exposes no accounts
    """
    if private_key:
        try:
            address = Account.from_key(private_key).address
        except (ValueError, TypeError) as e:
            raise SubmissionError(f"Invalid deployer private key: {e}") from e
        return DeployerAccount(address=address, private_key=private_key)

    accounts = rpc.accounts()
    if not accounts:
        raise SubmissionError(
            "No signing account available: set DEPLOYER_PRIVATE_KEY "
            "or use a node with unlocked accounts"
        )

    logger.info("Using node-managed account %s", accounts[0])
    return DeployerAccount(address=to_checksum_address(accounts[0]))
