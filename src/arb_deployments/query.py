"""Batched, per-group isolated read client for the deployed contract."""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .config_store import ConfigStore
from .constants import (
    DEFAULT_LOGICAL_NAME,
    INVALID_TOKEN_SENTINEL,
    NATIVE_TOKEN_ADDRESS,
    SELF_TEST_TOKEN_SYMBOL,
)
from .contract import ArbContract
from .exceptions import ContractNotDeployedError, QueryGroupError
from .rpc import JsonRpcClient
from .types import ContractInfo, GroupStatus, ItemResult, QueryGroupResult, QueryReport, TokenEntry

logger = logging.getLogger(__name__)

# Token registry: {symbol: TokenEntry} from the config, or bare addresses
Registry = Union[Mapping[str, TokenEntry], Sequence[str]]

BALANCES = "balances"
TOKEN_INFO = "token-info"
VALIDATION = "validation"
CONTRACT_INFO = "contract-info"
SELF_TEST = "self-test"

# Default run order
ALL_GROUPS = (CONTRACT_INFO, VALIDATION, TOKEN_INFO, BALANCES, SELF_TEST)


def registry_items(registry: Registry) -> List[Tuple[str, str]]:
    """
    Flatten a registry into ordered (key, address) pairs.

    Mapping keys (token symbols) become keys; bare addresses key themselves.
    """
    if isinstance(registry, Mapping):
        return [(symbol, entry.address) for symbol, entry in registry.items()]
    return [(address, address) for address in registry]


def _positional(group: str, keys: Sequence[str], values: Sequence[Any]) -> List[ItemResult]:
    # Results carry no identifiers, so they are only usable if lengths match
    if len(values) != len(keys):
        raise QueryGroupError(
            f"{group}: malformed response, expected {len(keys)} results, got {len(values)}"
        )
    return [ItemResult(key=key, value=value) for key, value in zip(keys, values)]


class BatchedQueryClient:
    """Runs grouped reads against a deployed contract.

    Each group is isolated: any exception raised while it runs is logged
    and turned into a failed QueryGroupResult, so the remaining groups
    still run.
    """

    def __init__(
        self,
        contract: ArbContract,
        tokens: Optional[Mapping[str, TokenEntry]] = None,
        native_symbol: str = "MATIC",
        self_test_symbol: str = SELF_TEST_TOKEN_SYMBOL,
    ):
        """
        Initialize the client.

        Args:
            contract: Handle on the deployed contract
            tokens: Default token registry for groups called without one
            native_symbol: Key for the native-currency balance item
            self_test_symbol: Registry token the self-test reads first
        """
        self.contract = contract
        self.tokens: Dict[str, TokenEntry] = dict(tokens or {})
        self.native_symbol = native_symbol
        self.self_test_symbol = self_test_symbol

    @classmethod
    def from_config(
        cls,
        store: ConfigStore,
        rpc: JsonRpcClient,
        abi: List[Dict[str, Any]],
        logical_name: str = DEFAULT_LOGICAL_NAME,
        native_symbol: str = "MATIC",
    ) -> "BatchedQueryClient":
        """
        Build a client for the contract recorded in the config.

        Raises:
            ConfigNotFoundError: If the config file does not exist
            ContractNotDeployedError: If the config has no entry for ``logical_name``
        """
        state = store.read()
        address = state.contract_address(logical_name)
        if not address:
            raise ContractNotDeployedError(
                f"Contract '{logical_name}' is not deployed on {store.network}; "
                "run the deploy command first"
            )

        logger.info("Using %s contract at %s", logical_name, address)
        return cls(ArbContract(rpc, address, abi), state.tokens, native_symbol=native_symbol)

    def run_group(self, group: str, fn: Callable[[], List[ItemResult]]) -> QueryGroupResult:
        """
        Run one query group behind a failure boundary.

        Args:
            group: Group name used in logs and the result
            fn: Performs the group's remote call(s) and returns ordered items

        Returns:
            QueryGroupResult; FAILED if ``fn`` raised or any item carries an error
        """
        try:
            items = fn()
        except Exception as e:
            logger.error("Query group '%s' failed: %s", group, e)
            return QueryGroupResult(group=group, status=GroupStatus.FAILED, error=str(e))

        failed_items = [item for item in items if not item.ok]
        if failed_items:
            message = "; ".join(f"{item.key}: {item.error}" for item in failed_items)
            logger.error("Query group '%s' failed: %s", group, message)
            return QueryGroupResult(
                group=group, status=GroupStatus.FAILED, items=tuple(items), error=message
            )

        logger.debug("Query group '%s' succeeded with %d item(s)", group, len(items))
        return QueryGroupResult(group=group, status=GroupStatus.SUCCEEDED, items=tuple(items))

    def _registry(self, registry: Optional[Registry]) -> List[Tuple[str, str]]:
        return registry_items(self.tokens if registry is None else registry)

    def balances(self, registry: Optional[Registry] = None) -> QueryGroupResult:
        """Token balances in one batched call, then the native balance."""

        def fn() -> List[ItemResult]:
            entries = self._registry(registry)
            keys = [key for key, _ in entries]
            values = (
                self.contract.get_multiple_balances([address for _, address in entries])
                if entries
                else []
            )
            items = _positional(BALANCES, keys, values)
            native = self.contract.get_balance(NATIVE_TOKEN_ADDRESS)
            return items + [ItemResult(key=self.native_symbol, value=native)]

        return self.run_group(BALANCES, fn)

    def token_info(self, registry: Optional[Registry] = None) -> QueryGroupResult:
        """Address, symbol, decimals, balance and supply per token, one batched call."""

        def fn() -> List[ItemResult]:
            entries = self._registry(registry)
            if not entries:
                return []
            infos = self.contract.get_multiple_token_info([address for _, address in entries])
            return _positional(TOKEN_INFO, [key for key, _ in entries], infos)

        return self.run_group(TOKEN_INFO, fn)

    def validate(self, registry: Optional[Registry] = None) -> QueryGroupResult:
        """Whether each token is a conformant ERC-20, one batched call."""

        def fn() -> List[ItemResult]:
            entries = self._registry(registry)
            if not entries:
                return []
            valid = self.contract.batch_validate_tokens([address for _, address in entries])
            return _positional(VALIDATION, [key for key, _ in entries], valid)

        return self.run_group(VALIDATION, fn)

    def contract_info(self) -> QueryGroupResult:
        """Metadata and owner of the contract, combined."""

        def fn() -> List[ItemResult]:
            version, deployed, paused = self.contract.get_contract_info()
            owner = self.contract.owner()
            info = ContractInfo(
                version=version,
                deployed=deployed,
                paused=paused,
                owner=owner,
                address=self.contract.address,
            )
            return [ItemResult(key=self.contract.address, value=info)]

        return self.run_group(CONTRACT_INFO, fn)

    def self_test(self, registry: Optional[Registry] = None) -> QueryGroupResult:
        """
        Smoke test of the deployed contract.

        Reads a known token's balance, validates that token (expected valid)
        and validates the sentinel address (expected invalid). An unmet
        expectation marks its item, and therefore the group, as failed.
        """

        def fn() -> List[ItemResult]:
            entries = self._registry(registry)
            if not entries:
                raise QueryGroupError("no token available for the self-test")
            lookup = dict(entries)
            symbol = self.self_test_symbol if self.self_test_symbol in lookup else entries[0][0]
            address = lookup[symbol]

            balance = self.contract.get_balance(address)
            known_valid = self.contract.is_valid_token(address)
            sentinel_valid = self.contract.is_valid_token(INVALID_TOKEN_SENTINEL)

            return [
                ItemResult(key=f"balance:{symbol}", value=balance),
                ItemResult(
                    key=f"valid:{symbol}",
                    value=known_valid,
                    error=None if known_valid else "expected a valid token",
                ),
                ItemResult(
                    key=f"valid:{INVALID_TOKEN_SENTINEL}",
                    value=sentinel_valid,
                    error="expected an invalid token" if sentinel_valid else None,
                ),
            ]

        return self.run_group(SELF_TEST, fn)

    def run(
        self, groups: Optional[Sequence[str]] = None, registry: Optional[Registry] = None
    ) -> QueryReport:
        """
        Run several groups and collect their outcomes.

        Args:
            groups: Group names to run (defaults to ALL_GROUPS, in that order)
            registry: Token registry (defaults to the client's tokens)

        Returns:
            QueryReport with one result per requested group

        Raises:
            ValueError: If a group name is unknown
        """
        runners: Dict[str, Callable[[], QueryGroupResult]] = {
            CONTRACT_INFO: self.contract_info,
            VALIDATION: lambda: self.validate(registry),
            TOKEN_INFO: lambda: self.token_info(registry),
            BALANCES: lambda: self.balances(registry),
            SELF_TEST: lambda: self.self_test(registry),
        }
        groups = list(ALL_GROUPS if groups is None else groups)
        unknown = [g for g in groups if g not in runners]
        if unknown:
            raise ValueError(f"Unknown query group(s): {', '.join(unknown)}")

        report = QueryReport(results=tuple(runners[group]() for group in groups))
        if report.failed:
            logger.warning(
                "%d of %d query group(s) failed: %s",
                len(report.failed),
                len(report.results),
                ", ".join(report.failed),
            )
        return report
