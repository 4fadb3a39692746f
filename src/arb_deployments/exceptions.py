"""Custom exception classes for arb-deployments library."""

from typing import Any, Optional


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ConfigNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when the network config file is not found."""

    pass


class ContractNotDeployedError(DeploymentError, ValueError):
    """Raised when the config has no address for the requested contract."""

    pass


class ArtifactError(DeploymentError, ValueError):
    """Raised when a compiled artifact is missing, malformed or unsupported."""

    pass


class RpcError(DeploymentError, RuntimeError):
    """Raised when a JSON-RPC request fails at the transport or protocol level."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class EstimationError(DeploymentError):
    """Raised when the gas required for the deployment cannot be estimated."""

    pass


class SubmissionError(DeploymentError):
    """Raised when the network rejects or reverts the deployment transaction."""

    pass


class ConfirmationTimeout(DeploymentError, TimeoutError):
    """Raised when confirmations are not reached in time.

    The transaction may still be mined later, so the wait can be retried with
    the same ``transaction_hash``.
    """

    def __init__(self, message: str, transaction_hash: str):
        super().__init__(message)
        self.transaction_hash = transaction_hash


class PersistenceError(DeploymentError):
    """Raised when a deployment record or config file cannot be read or written."""

    pass


class QueryGroupError(DeploymentError):
    """Raised inside a query group; never crosses the group boundary."""

    pass


class VerificationWarning(UserWarning):
    """Post-deployment verification did not pass. Non-fatal."""

    pass
