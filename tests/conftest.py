"""Shared pytest fixtures for arb-deployments tests."""

import json
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from arb_deployments.accounts import DeployerAccount
from arb_deployments.artifacts import CompiledArtifact, parse_hardhat_artifact
from arb_deployments.config_store import ConfigStore
from arb_deployments.settings import NetworkContext
from arb_deployments.types import TokenInfo, TransactionReceipt

DEPLOYER = "0x9999999999999999999999999999999999999999"
DEPLOYED_ADDRESS = "0x1111111111111111111111111111111111111111"
OWNER = "0x2222222222222222222222222222222222222222"
TX_HASH = "0x" + "ab" * 32


class FakeRpc:
    """Stands in for JsonRpcClient where only balances are needed."""

    def __init__(self, balance: int = 10**18, error: Optional[Exception] = None):
        self.balance = balance
        self.error = error

    def get_balance(self, address: str, block: str = "latest") -> int:
        if self.error:
            raise self.error
        return self.balance


class FakeFactory:
    """Records deployment calls; each step can be told to fail."""

    def __init__(
        self,
        estimate: int = 1_000_000,
        receipt: Optional[TransactionReceipt] = None,
        estimate_error: Optional[Exception] = None,
        deploy_error: Optional[Exception] = None,
        wait_error: Optional[Exception] = None,
    ):
        self.estimate = estimate
        self.receipt = receipt or TransactionReceipt(
            transaction_hash=TX_HASH,
            block_number=100,
            status=1,
            gas_used=900_000,
            effective_gas_price=30 * 10**9,
            contract_address=DEPLOYED_ADDRESS,
            confirmations=2,
        )
        self.estimate_error = estimate_error
        self.deploy_error = deploy_error
        self.wait_error = wait_error
        self.gas_price: Optional[int] = None
        self.calls: List[Any] = []

    def estimate_deploy(self) -> int:
        self.calls.append("estimate")
        if self.estimate_error:
            raise self.estimate_error
        return self.estimate

    def deploy(self, gas_limit: int) -> str:
        self.calls.append(("deploy", gas_limit))
        if self.deploy_error:
            raise self.deploy_error
        self.gas_price = 30 * 10**9
        return TX_HASH

    def wait_confirmations(self, transaction_hash: str, **kwargs: Any) -> TransactionReceipt:
        self.calls.append(("wait", transaction_hash, kwargs))
        if self.wait_error:
            raise self.wait_error
        return self.receipt


class FakeContract:
    """In-memory Arb contract. Set ``errors[method]`` to make a method raise."""

    def __init__(
        self,
        address: str = DEPLOYED_ADDRESS,
        balances: Optional[Dict[str, int]] = None,
        valid: Optional[Dict[str, bool]] = None,
        version: str = "1.0.0",
    ):
        self.address = address
        self.balances = {k.lower(): v for k, v in (balances or {}).items()}
        self.valid = {k.lower(): v for k, v in (valid or {}).items()}
        self.version = version
        self.errors: Dict[str, Exception] = {}
        self.calls: List[str] = []

    def _enter(self, method: str) -> None:
        self.calls.append(method)
        if method in self.errors:
            raise self.errors[method]

    def get_balance(self, token: str) -> int:
        self._enter("get_balance")
        return self.balances.get(token.lower(), 0)

    def get_multiple_balances(self, tokens: List[str]) -> List[int]:
        self._enter("get_multiple_balances")
        return [self.balances.get(t.lower(), 0) for t in tokens]

    def get_multiple_token_info(self, tokens: List[str]) -> List[TokenInfo]:
        self._enter("get_multiple_token_info")
        return [
            TokenInfo(
                address=t,
                symbol=f"T{i}",
                decimals=18,
                balance=self.balances.get(t.lower(), 0),
                total_supply=10**24,
            )
            for i, t in enumerate(tokens)
        ]

    def batch_validate_tokens(self, tokens: List[str]) -> List[bool]:
        self._enter("batch_validate_tokens")
        return [self.valid.get(t.lower(), False) for t in tokens]

    def get_contract_info(self):
        self._enter("get_contract_info")
        return self.version, 1700000000, False

    def owner(self) -> str:
        self._enter("owner")
        return OWNER

    def is_valid_token(self, token: str) -> bool:
        self._enter("is_valid_token")
        return self.valid.get(token.lower(), False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_config_json(fixtures_dir: Path) -> Dict[str, Any]:
    """Load and return the sample network config fixture."""
    with open(fixtures_dir / "sample_config.json") as f:
        return json.load(f)


@pytest.fixture
def temp_config_path(tmp_path: Path, fixtures_dir: Path) -> Path:
    """Copy the sample config to config/polygon.json in a temp directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    config_path = config_dir / "polygon.json"
    shutil.copy(fixtures_dir / "sample_config.json", config_path)
    return config_path


@pytest.fixture
def config_store(temp_config_path: Path) -> ConfigStore:
    return ConfigStore(temp_config_path, "polygon")


@pytest.fixture
def deployments_dir(tmp_path: Path) -> Path:
    return tmp_path / "deployments"


@pytest.fixture
def artifact_path(fixtures_dir: Path) -> Path:
    """Return path to the sample Hardhat artifact."""
    return fixtures_dir / "Arb.json"


@pytest.fixture
def artifact(artifact_path: Path) -> CompiledArtifact:
    return parse_hardhat_artifact(artifact_path)


@pytest.fixture
def fake_rpc() -> FakeRpc:
    return FakeRpc()


@pytest.fixture
def network_context(fake_rpc: FakeRpc) -> NetworkContext:
    """Polygon context with a node-managed deployer and fast polling."""
    return NetworkContext(
        network="polygon",
        chain_id=137,
        rpc=fake_rpc,
        account=DeployerAccount(address=DEPLOYER),
        native_symbol="MATIC",
        block_explorer_url="https://polygonscan.com",
        confirmation_timeout=5.0,
        poll_interval=0.0,
    )


@pytest.fixture
def make_factory():
    """Factory for FakeFactory instances (keyword args as FakeFactory)."""
    return FakeFactory


@pytest.fixture
def fake_contract() -> FakeContract:
    """Contract knowing the sample tokens: USDC and WETH valid, WMATIC invalid."""
    return FakeContract(
        balances={
            "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174": 1_500_000,
            "0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619": 2 * 10**18,
            "0x0000000000000000000000000000000000000000": 5 * 10**17,
        },
        valid={
            "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174": True,
            "0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619": True,
        },
    )
