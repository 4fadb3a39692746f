"""Deployment record files and config reconciliation."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .config_store import ConfigStore
from .exceptions import ConfigNotFoundError, PersistenceError
from .paths import get_record_path
from .types import DeploymentRecord

logger = logging.getLogger(__name__)


def save_record(record: DeploymentRecord, directory: Union[Path, str]) -> Path:
    """
    Write a deployment record to a new time-stamped file.

    Existing records are never overwritten; the file name carries the
    current epoch milliseconds.

    Args:
        record: Record to persist
        directory: Deployments directory

    Returns:
        Path of the written file

    Raises:
        PersistenceError: If the file cannot be written
    """
    path = get_record_path(record.logical_name, directory)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # "x" refuses to clobber a record written in the same millisecond
        with open(path, "x") as f:
            json.dump(record.to_dict(), f, indent=2)
    except OSError as e:
        raise PersistenceError(f"Could not write deployment record {path}: {e}") from e

    return path


def load_record(path: Union[Path, str]) -> DeploymentRecord:
    """
    Load one deployment record.

    Raises:
        PersistenceError: If the file is unreadable or not a record
    """
    try:
        with open(path) as f:
            return DeploymentRecord.from_dict(json.load(f))
    except (OSError, json.JSONDecodeError, TypeError, AttributeError) as e:
        raise PersistenceError(f"Could not load deployment record {path}: {e}") from e


def _record_sort_key(path: Path) -> tuple[str, int]:
    prefix, _, millis = path.stem.rpartition("-")
    return prefix, int(millis) if millis.isdigit() else -1


def load_records(directory: Union[Path, str]) -> List[DeploymentRecord]:
    """
    Load all deployment records in chronological order.

    Unreadable files are skipped with a warning.

    Args:
        directory: Deployments directory

    Returns:
        Records sorted by deployment time (oldest first); empty if the
        directory does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    records = []
    for path in sorted(directory.glob("*.json"), key=_record_sort_key):
        try:
            records.append(load_record(path))
        except PersistenceError as e:
            logger.warning("Skipping %s", e)

    records.sort(key=lambda r: r.deployment_time)
    return records


def latest_records(
    directory: Union[Path, str], network: Optional[str] = None
) -> Dict[str, DeploymentRecord]:
    """Most recent record per logical name, optionally limited to one network."""
    latest: Dict[str, DeploymentRecord] = {}
    for record in load_records(directory):
        if network is None or record.network == network:
            latest[record.logical_name] = record
    return latest


def latest_record(
    directory: Union[Path, str], logical_name: str, network: Optional[str] = None
) -> Optional[DeploymentRecord]:
    """Most recent record for a logical name (and network), or None."""
    return latest_records(directory, network).get(logical_name)


def find_unreconciled(store: ConfigStore, directory: Union[Path, str]) -> List[DeploymentRecord]:
    """
    Find deployments whose record was written but whose config entry was not.

    Only the latest record per logical name on the store's network is
    considered; older records have been superseded.

    Args:
        store: Config store for the network
        directory: Deployments directory

    Returns:
        Latest records whose address differs from the config entry
    """
    try:
        state = store.read()
        configured = {name: entry.address for name, entry in state.contracts.items()}
    except ConfigNotFoundError:
        configured = {}

    return [
        record
        for name, record in latest_records(directory, store.network).items()
        if (configured.get(name) or "").lower() != record.contract_address.lower()
    ]


def reconcile(
    store: ConfigStore, directory: Union[Path, str], repair: bool = False
) -> List[DeploymentRecord]:
    """
    Report, and optionally repair, deployments missing from the config.

    Args:
        store: Config store for the network
        directory: Deployments directory
        repair: Write the missing config entries

    Returns:
        The unreconciled records found before any repair
    """
    unreconciled = find_unreconciled(store, directory)

    for record in unreconciled:
        logger.warning(
            "Deployment of %s at %s (%s) has no matching config entry",
            record.logical_name,
            record.contract_address,
            record.deployment_time,
        )
        if repair:
            store.record_deployment(
                record.logical_name, record.contract_address, record.deployment_time
            )

    return unreconciled
