"""Runtime settings and network context for arb-deployments library."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .accounts import DeployerAccount, resolve_account
from .constants import (
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    LOW_BALANCE_THRESHOLD_WEI,
    MIN_CONFIRMATIONS,
    NETWORK_CONFIG,
)
from .paths import get_config_path, get_default_config_dir, get_default_deployments_dir
from .rpc import JsonRpcClient


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def network_config(network: str) -> Dict[str, Any]:
    """
    Look up a network in NETWORK_CONFIG.

    Raises:
        ValueError: If the network is unknown
    """
    if network not in NETWORK_CONFIG:
        known = ", ".join(sorted(NETWORK_CONFIG))
        raise ValueError(f"Unknown network '{network}' (known: {known})")
    return NETWORK_CONFIG[network]


@dataclass(frozen=True)
class Settings:
    """Immutable configuration sourced from environment variables."""

    network: str = "polygon"
    rpc_url: Optional[str] = None  # Defaults to the network's public RPC
    private_key: Optional[str] = None
    config_dir: Path = Path("config")
    deployments_dir: Path = Path("deployments")
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    min_confirmations: int = MIN_CONFIRMATIONS
    min_balance_wei: int = LOW_BALANCE_THRESHOLD_WEI

    @classmethod
    def from_env(cls, network: Optional[str] = None) -> Settings:
        network = network or os.getenv("ARB_NETWORK", cls.network)
        rpc_env = network_config(network)["default_rpc_env"]
        return cls(
            network=network,
            rpc_url=os.getenv(rpc_env) or None,
            private_key=os.getenv("DEPLOYER_PRIVATE_KEY") or None,
            config_dir=Path(os.getenv("ARB_CONFIG_DIR") or get_default_config_dir()),
            deployments_dir=Path(os.getenv("ARB_DEPLOYMENTS_DIR") or get_default_deployments_dir()),
            confirmation_timeout=_env_float("ARB_CONFIRMATION_TIMEOUT", cls.confirmation_timeout),
            poll_interval=_env_float("ARB_POLL_INTERVAL", cls.poll_interval),
            min_balance_wei=int(os.getenv("ARB_MIN_BALANCE_WEI") or cls.min_balance_wei),
        )

    @property
    def resolved_rpc_url(self) -> str:
        return self.rpc_url or network_config(self.network)["default_rpc_url"]

    @property
    def config_path(self) -> Path:
        return get_config_path(self.network, self.config_dir)


@dataclass(frozen=True)
class NetworkContext:
    """Everything a deployment needs to know about its target network."""

    network: str
    chain_id: int
    rpc: JsonRpcClient
    account: DeployerAccount
    native_symbol: str = "ETH"
    block_explorer_url: Optional[str] = None
    min_confirmations: int = MIN_CONFIRMATIONS
    confirmation_timeout: Optional[float] = DEFAULT_CONFIRMATION_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    min_balance_wei: int = LOW_BALANCE_THRESHOLD_WEI

    def explorer_address_url(self, address: str) -> Optional[str]:
        if not self.block_explorer_url:
            return None
        return f"{self.block_explorer_url}/address/{address}"

    @classmethod
    def from_settings(
        cls, settings: Settings, rpc: Optional[JsonRpcClient] = None
    ) -> NetworkContext:
        """
        Connect to the configured network and resolve the deployer.

        Raises:
            ValueError: If the network is unknown
            RpcError: If the node cannot be reached
            SubmissionError: If no signing account is available
        """
        config = network_config(settings.network)
        rpc = rpc or JsonRpcClient(settings.resolved_rpc_url)
        return cls(
            network=settings.network,
            chain_id=config["chain_id"],
            rpc=rpc,
            account=resolve_account(rpc, settings.private_key),
            native_symbol=config["native_symbol"],
            block_explorer_url=config["block_explorer_url"],
            min_confirmations=settings.min_confirmations,
            confirmation_timeout=settings.confirmation_timeout,
            poll_interval=settings.poll_interval,
            min_balance_wei=settings.min_balance_wei,
        )
