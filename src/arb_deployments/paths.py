"""Path management utilities for arb-deployments library."""

from datetime import datetime
from pathlib import Path
from typing import Optional, Union


def get_default_config_dir() -> Path:
    """
    Get default config directory.

    Returns:
        Path to ./config
    """
    return Path.cwd() / "config"


def get_default_deployments_dir() -> Path:
    """
    Get default directory for deployment records.

    Returns:
        Path to ./deployments
    """
    return Path.cwd() / "deployments"


def get_default_artifact_path(contract_name: str = "Arb") -> Path:
    """
    Get the Hardhat artifact path for a contract.

    Args:
        contract_name: Solidity contract name

    Returns:
        Path to ./artifacts/contracts/{name}.sol/{name}.json
    """
    return Path.cwd() / "artifacts" / "contracts" / f"{contract_name}.sol" / f"{contract_name}.json"


def get_config_path(network: str, config_dir: Optional[Union[Path, str]] = None) -> Path:
    """
    Get the config file path for a network.

    Args:
        network: Network name (e.g., "polygon")
        config_dir: Custom config directory (defaults to ./config)

    Returns:
        Absolute path to {config_dir}/{network}.json
    """
    if config_dir is None:
        config_dir = get_default_config_dir()
    else:
        config_dir = Path(config_dir).absolute()

    return config_dir / f"{network}.json"


def get_record_path(
    logical_name: str,
    deployments_dir: Optional[Union[Path, str]] = None,
    when: Optional[datetime] = None,
) -> Path:
    """
    Get a time-stamped path for a new deployment record.

    Args:
        logical_name: Config key of the deployed contract (e.g., "arb")
        deployments_dir: Custom records directory (defaults to ./deployments)
        when: Timestamp to embed (defaults to now)

    Returns:
        Absolute path to {deployments_dir}/{logical_name}-{epoch_millis}.json
    """
    if deployments_dir is None:
        deployments_dir = get_default_deployments_dir()
    else:
        deployments_dir = Path(deployments_dir).absolute()

    if when is None:
        when = datetime.now().astimezone()

    millis = int(when.timestamp() * 1000)
    return deployments_dir / f"{logical_name}-{millis}.json"
