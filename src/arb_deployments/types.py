"""Data types and dataclasses for arb-deployments library."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class DeploymentRecord:
    """Outcome of one completed deployment run. Written once, never mutated."""

    # Required fields
    network: str  # e.g., "polygon"
    contract_address: str  # Checksummed address
    deployer_address: str
    transaction_hash: str
    block_number: int  # Block the deployment was included in
    gas_used: int
    deployment_time: str  # ISO-8601, UTC
    contract_name: str  # Artifact name, e.g., "Arb"
    version: str  # Artifact version tag, e.g., "1.0.0"

    # Derived fields
    logical_name: str = "arb"  # Key under config "contracts"
    gas_limit: int = 0
    gas_price: int = 0  # Effective price in wei per gas
    total_cost_wei: int = 0
    confirmations: int = 0
    verified: bool = False
    diagnostics: Tuple[str, ...] = ()
    explorer_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["diagnostics"] = list(self.diagnostics)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentRecord":
        known = {name for name in cls.__dataclass_fields__}
        values = {key: value for key, value in data.items() if key in known}
        values["diagnostics"] = tuple(values.get("diagnostics", ()))
        return cls(**values)


@dataclass(frozen=True)
class TransactionReceipt:
    """Mined transaction as seen once the requested depth was reached."""

    transaction_hash: str
    block_number: int
    status: int  # 1 = success, 0 = reverted
    gas_used: int
    effective_gas_price: int
    contract_address: Optional[str] = None
    confirmations: int = 0


@dataclass(frozen=True)
class ContractEntry:
    """Deployed contract entry in the config file."""

    address: str
    deployed: Optional[str] = None  # ISO-8601 deployment time


@dataclass(frozen=True)
class TokenEntry:
    """Token registry entry in the config file."""

    address: str
    decimals: int = 18


@dataclass
class ConfigState:
    """Parsed view of a network config file."""

    contracts: Dict[str, ContractEntry] = field(default_factory=dict)
    tokens: Dict[str, TokenEntry] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConfigState":
        contracts = {
            name: ContractEntry(address=entry["address"], deployed=entry.get("deployed"))
            for name, entry in (data.get("contracts") or {}).items()
        }
        tokens = {
            symbol: TokenEntry(address=entry["address"], decimals=entry.get("decimals", 18))
            for symbol, entry in (data.get("tokens") or {}).items()
        }
        return cls(contracts=contracts, tokens=tokens)

    def contract_address(self, name: str) -> Optional[str]:
        entry = self.contracts.get(name)
        return entry.address if entry else None


@dataclass(frozen=True)
class TokenInfo:
    """Per-token record returned by getMultipleTokenInfo."""

    address: str
    symbol: str
    decimals: int
    balance: int
    total_supply: int


@dataclass(frozen=True)
class ContractInfo:
    """Combined getContractInfo() and owner() reads."""

    version: str
    deployed: int  # Unix timestamp stored by the contract
    paused: bool
    owner: str
    address: str


class GroupStatus(Enum):
    """Outcome of one query group."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ItemResult:
    """One positional result inside a query group."""

    key: str  # Registry symbol or identifier this result belongs to
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class QueryGroupResult:
    """Result of one query group. Items follow the input identifier order."""

    group: str
    status: GroupStatus
    items: Tuple[ItemResult, ...] = ()
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is GroupStatus.SUCCEEDED

    def values(self) -> List[Any]:
        return [item.value for item in self.items]


@dataclass(frozen=True)
class QueryReport:
    """Per-group outcomes of one query run."""

    results: Tuple[QueryGroupResult, ...] = ()

    @property
    def succeeded(self) -> List[str]:
        return [r.group for r in self.results if r.succeeded]

    @property
    def failed(self) -> List[str]:
        return [r.group for r in self.results if not r.succeeded]

    @property
    def ok(self) -> bool:
        return not self.failed

    def get(self, group: str) -> Optional[QueryGroupResult]:
        for result in self.results:
            if result.group == group:
                return result
        return None
