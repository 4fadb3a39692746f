"""Deployment controller for arb-deployments library."""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from .artifacts import CompiledArtifact
from .config_store import ConfigStore
from .constants import DEFAULT_LOGICAL_NAME, GAS_BUFFER_PERCENT, NATIVE_TOKEN_ADDRESS
from .contract import ArbContract, ContractFactory
from .exceptions import (
    ConfigNotFoundError,
    EstimationError,
    PersistenceError,
    SubmissionError,
    VerificationWarning,
)
from .records import save_record
from .settings import NetworkContext
from .types import DeploymentRecord
from .units import format_ether

logger = logging.getLogger(__name__)


class DeploymentStage(Enum):
    """Stages of one deployment run, in execution order."""

    PENDING = "pending"
    ESTIMATING = "estimating"
    SUBMITTING = "submitting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    VERIFYING = "verifying"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


def buffered_gas_limit(estimate: int, buffer_percent: int = GAS_BUFFER_PERCENT) -> int:
    """Apply the safety buffer to a gas estimate (integer math, rounds down)."""
    return estimate * (100 + buffer_percent) // 100


def _default_factory(artifact: CompiledArtifact, context: NetworkContext) -> ContractFactory:
    return ContractFactory(context.rpc, artifact, context.account, chain_id=context.chain_id)


def _default_contract(address: str, artifact: CompiledArtifact, context: NetworkContext) -> ArbContract:
    return ArbContract(context.rpc, address, artifact.abi)


class DeploymentController:
    """Deploys an artifact, waits for it to settle, verifies it and records it.

    Failures up to and including confirmation are fatal and raised.
    Verification and persistence failures happen after an irreversible
    on-chain deployment, so they are logged and returned as diagnostics
    on the record instead.
    """

    def __init__(
        self,
        store: ConfigStore,
        deployments_dir: Union[Path, str],
        logical_name: str = DEFAULT_LOGICAL_NAME,
        factory_builder: Callable[[CompiledArtifact, NetworkContext], ContractFactory] = _default_factory,
        contract_builder: Callable[[str, CompiledArtifact, NetworkContext], ArbContract] = _default_contract,
    ):
        """
        Initialize the controller.

        Args:
            store: Config store updated after a successful deployment
            deployments_dir: Directory for time-stamped deployment records
            logical_name: Key under the config's ``contracts`` section
            factory_builder: Creates the deploying handle for an artifact
            contract_builder: Creates the read handle for a deployed address
        """
        self.store = store
        self.deployments_dir = Path(deployments_dir)
        self.logical_name = logical_name
        self._factory_builder = factory_builder
        self._contract_builder = contract_builder
        self.stage = DeploymentStage.PENDING
        self.record_path: Optional[Path] = None

    def _enter(self, stage: DeploymentStage) -> None:
        logger.debug("Deployment stage %s -> %s", self.stage.value, stage.value)
        self.stage = stage

    def deploy(self, artifact: CompiledArtifact, context: NetworkContext) -> DeploymentRecord:
        """
        Deploy ``artifact`` to the network described by ``context``.

        Args:
            artifact: Compiled contract without constructor arguments
            context: Target network, RPC client and deployer account

        Returns:
            DeploymentRecord of the confirmed deployment, including cost
            totals and any verification/persistence diagnostics

        Raises:
            EstimationError: If gas estimation fails (nothing was sent)
            SubmissionError: If the transaction is rejected or reverts
            ConfirmationTimeout: If confirmations are not reached in time
        """
        self.stage = DeploymentStage.PENDING
        self.record_path = None
        try:
            return self._run(artifact, context)
        except Exception:
            logger.error("Deployment of %s failed during %s", artifact.contract_name, self.stage.value)
            self._enter(DeploymentStage.FAILED)
            raise

    def _run(self, artifact: CompiledArtifact, context: NetworkContext) -> DeploymentRecord:
        self._log_previous_deployment()
        logger.info(
            "Deploying %s %s to %s from %s",
            artifact.contract_name,
            artifact.version,
            context.network,
            context.account.address,
        )

        self._enter(DeploymentStage.ESTIMATING)
        factory = self._factory_builder(artifact, context)
        gas_limit = self._estimate(factory)

        self._enter(DeploymentStage.SUBMITTING)
        self._check_balance(context)
        transaction_hash = self._submit(factory, gas_limit)

        self._enter(DeploymentStage.AWAITING_CONFIRMATION)
        receipt = factory.wait_confirmations(
            transaction_hash,
            min_depth=context.min_confirmations,
            timeout=context.confirmation_timeout,
            poll_interval=context.poll_interval,
        )
        if not receipt.contract_address:
            raise SubmissionError(f"Receipt of {transaction_hash} has no contract address")
        logger.info(
            "%s deployed at %s (%d confirmations)",
            artifact.contract_name,
            receipt.contract_address,
            receipt.confirmations,
        )

        diagnostics: List[str] = []

        self._enter(DeploymentStage.VERIFYING)
        contract = self._contract_builder(receipt.contract_address, artifact, context)
        try:
            self._verify(contract, artifact)
            verified = True
        except VerificationWarning as w:
            logger.warning("Contract verification failed: %s", w)
            diagnostics.append(f"verification: {w}")
            verified = False

        self._enter(DeploymentStage.PERSISTING)
        gas_price = receipt.effective_gas_price or factory.gas_price or 0
        record = DeploymentRecord(
            network=context.network,
            contract_address=receipt.contract_address,
            deployer_address=context.account.address,
            transaction_hash=transaction_hash,
            block_number=receipt.block_number,
            gas_used=receipt.gas_used,
            deployment_time=datetime.now(timezone.utc).isoformat(),
            contract_name=artifact.contract_name,
            version=artifact.version,
            logical_name=self.logical_name,
            gas_limit=gas_limit,
            gas_price=gas_price,
            total_cost_wei=receipt.gas_used * gas_price,
            confirmations=receipt.confirmations,
            verified=verified,
            diagnostics=tuple(diagnostics),
            explorer_url=context.explorer_address_url(receipt.contract_address),
        )
        record = self._persist(record)

        self._enter(DeploymentStage.DONE)
        logger.info(
            "Deployment complete: %s, total cost %s %s",
            record.contract_address,
            format_ether(record.total_cost_wei),
            context.native_symbol,
        )
        return record

    def _log_previous_deployment(self) -> None:
        try:
            previous = self.store.read().contract_address(self.logical_name)
        except ConfigNotFoundError:
            return
        except PersistenceError as e:
            logger.warning("Could not read existing config: %s", e)
            return
        if previous:
            logger.info("Replacing previous %s deployment at %s", self.logical_name, previous)

    def _estimate(self, factory: ContractFactory) -> int:
        try:
            estimate = factory.estimate_deploy()
        except Exception as e:
            raise EstimationError(f"Gas estimation failed: {e}") from e

        gas_limit = buffered_gas_limit(estimate)
        logger.info("Estimated gas %d, using limit %d", estimate, gas_limit)
        return gas_limit

    def _check_balance(self, context: NetworkContext) -> None:
        try:
            balance = context.rpc.get_balance(context.account.address)
        except Exception as e:
            logger.warning("Could not read deployer balance: %s", e)
            return

        logger.info("Deployer balance: %s %s", format_ether(balance), context.native_symbol)
        if balance < context.min_balance_wei:
            logger.warning(
                "Low balance (%s %s < %s), deployment may run out of funds",
                format_ether(balance),
                context.native_symbol,
                format_ether(context.min_balance_wei),
            )

    def _submit(self, factory: ContractFactory, gas_limit: int) -> str:
        try:
            transaction_hash = factory.deploy(gas_limit)
        except Exception as e:
            raise SubmissionError(f"Deployment transaction rejected: {e}") from e

        logger.info("Deployment transaction submitted: %s", transaction_hash)
        return transaction_hash

    def _verify(self, contract: ArbContract, artifact: CompiledArtifact) -> None:
        try:
            version, _, paused = contract.get_contract_info()
            native_balance = contract.get_balance(NATIVE_TOKEN_ADDRESS)
        except Exception as e:
            raise VerificationWarning(f"contract did not respond: {e}") from e

        if version != artifact.version:
            raise VerificationWarning(
                f"expected version {artifact.version}, contract reports {version}"
            )
        logger.info(
            "Contract verified: version %s, paused=%s, native balance %s",
            version,
            paused,
            format_ether(native_balance),
        )

    def _persist(self, record: DeploymentRecord) -> DeploymentRecord:
        diagnostics = list(record.diagnostics)

        try:
            self.record_path = save_record(record, self.deployments_dir)
            logger.info("Deployment record saved to %s", self.record_path)
        except PersistenceError as e:
            logger.error("%s", e)
            diagnostics.append(f"record: {e}")

        try:
            self.store.record_deployment(
                self.logical_name, record.contract_address, record.deployment_time
            )
        except (PersistenceError, ValueError) as e:
            logger.warning("Could not update config: %s", e)
            diagnostics.append(f"config: {e}")

        if len(diagnostics) == len(record.diagnostics):
            return record
        return replace(record, diagnostics=tuple(diagnostics))
