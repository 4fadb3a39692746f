"""
arb-deployments: deploy the Arb contract and query it in isolated batches
"""

from importlib.metadata import PackageNotFoundError, version

from .artifacts import CompiledArtifact, parse_hardhat_artifact
from .config_store import ConfigStore
from .deployer import DeploymentController, DeploymentStage
from .exceptions import (
    ArtifactError,
    ConfigNotFoundError,
    ConfirmationTimeout,
    ContractNotDeployedError,
    DeploymentError,
    EstimationError,
    PersistenceError,
    QueryGroupError,
    RpcError,
    SubmissionError,
    VerificationWarning,
)
from .query import BatchedQueryClient
from .records import reconcile
from .settings import NetworkContext, Settings
from .types import ConfigState, DeploymentRecord, GroupStatus, QueryGroupResult, QueryReport

try:
    __version__ = version("arb-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentController",
    "DeploymentStage",
    "BatchedQueryClient",
    "ConfigStore",
    "CompiledArtifact",
    "parse_hardhat_artifact",
    "NetworkContext",
    "Settings",
    "reconcile",
    "ConfigState",
    "DeploymentRecord",
    "GroupStatus",
    "QueryGroupResult",
    "QueryReport",
    "DeploymentError",
    "ArtifactError",
    "ConfigNotFoundError",
    "ContractNotDeployedError",
    "RpcError",
    "EstimationError",
    "SubmissionError",
    "ConfirmationTimeout",
    "PersistenceError",
    "QueryGroupError",
    "VerificationWarning",
]
