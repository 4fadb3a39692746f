"""Persisted network config for arb-deployments library."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from eth_utils import is_address

from .exceptions import ConfigNotFoundError, PersistenceError
from .types import ConfigState

logger = logging.getLogger(__name__)


@dataclass
class ConfigValidation:
    """Problems found in a config file."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


class ConfigStore:
    """Reads and updates one network's config file.

    Only the ``contracts`` section is ever written. Writers are not
    coordinated, so a single deploying process is assumed.
    """

    def __init__(self, path: Union[Path, str], network: Optional[str] = None):
        """
        Initialize the store.

        Args:
            path: Path to the config file (e.g., config/polygon.json)
            network: Network the file describes (defaults to the file stem)
        """
        self.path = Path(path)
        self.network = network or self.path.stem

    def exists(self) -> bool:
        return self.path.exists()

    def _load_raw(self) -> Dict[str, Any]:
        try:
            with open(self.path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Config file {self.path} is not valid JSON: {e}") from e
        except FileNotFoundError as e:
            raise ConfigNotFoundError(f"Config file not found at {self.path}") from e
        except OSError as e:
            raise PersistenceError(f"Could not read config file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Config file {self.path} must contain a JSON object")
        return data

    def read(self) -> ConfigState:
        """
        Load the current config.

        Returns:
            ConfigState

        Raises:
            ConfigNotFoundError: If the config file does not exist
            PersistenceError: If the file is unreadable, not a JSON object or
                has a malformed entry
        """
        if not self.path.exists():
            raise ConfigNotFoundError(f"Config file not found at {self.path}")

        data = self._load_raw()
        try:
            return ConfigState.from_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise PersistenceError(
                f"Config file {self.path} has a malformed entry ({type(e).__name__}: {e})"
            ) from e

    def write(self, update: Dict[str, Any]) -> None:
        """
        Merge contract entries into the persisted config.

        Loads the current file, replaces only the named entries under
        ``contracts`` and writes the whole document back. Other sections
        and other contract entries are preserved as they are.

        Args:
            update: ``{"contracts": {name: {"address": ..., "deployed": ...}}}``

        Raises:
            ValueError: If the update touches anything other than ``contracts``
            PersistenceError: If the file cannot be read or written
        """
        unsupported = set(update) - {"contracts"}
        if unsupported:
            raise ValueError(
                f"Only 'contracts' can be updated, got: {', '.join(sorted(unsupported))}"
            )

        try:
            data = self._load_raw() if self.path.exists() else {}
            contracts = data.get("contracts") or {}
            if not isinstance(contracts, dict):
                raise PersistenceError(f"Config file {self.path}: 'contracts' must be an object")
            for name, entry in update.get("contracts", {}).items():
                contracts[name] = dict(entry)
            data["contracts"] = contracts

            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise PersistenceError(f"Could not update config {self.path}: {e}") from e

        logger.info("Config %s updated: %s", self.path, ", ".join(update.get("contracts", {})))

    def record_deployment(self, name: str, address: str, deployed: str) -> None:
        """Point ``contracts[name]`` at a newly deployed address."""
        self.write({"contracts": {name: {"address": address, "deployed": deployed}}})

    def validate(self) -> ConfigValidation:
        """
        Check the token registry and contract entries.

        Returns:
            ConfigValidation with errors (unusable config) and warnings
        """
        result = ConfigValidation()
        try:
            data = self._load_raw()
        except FileNotFoundError:
            result.errors.append(f"Config file not found at {self.path}")
            return result
        except PersistenceError as e:
            result.errors.append(str(e))
            return result

        tokens = data.get("tokens") or {}
        contracts = data.get("contracts") or {}
        for section, value in (("tokens", tokens), ("contracts", contracts)):
            if not isinstance(value, dict):
                result.errors.append(f"'{section}' must be an object")
                return result

        if not tokens:
            result.errors.append("No tokens configured")

        for symbol, token in tokens.items():
            address = token.get("address") if isinstance(token, dict) else None
            if not isinstance(address, str) or not is_address(address):
                result.errors.append(f"Invalid address for {symbol}: {address}")
                continue
            decimals = token.get("decimals")
            if not isinstance(decimals, int) or isinstance(decimals, bool) or not 0 <= decimals <= 18:
                result.warnings.append(f"Invalid decimals for {symbol}: {decimals}")

        for name, contract in contracts.items():
            address = contract.get("address") if isinstance(contract, dict) else None
            if not isinstance(address, str) or not is_address(address):
                result.warnings.append(f"Invalid address for contract {name}: {address}")

        return result
