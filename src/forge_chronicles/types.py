"""Data types and dataclasses for forge-chronicles library."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .constants import PROXY_TYPE


@dataclass
class AdditionalContract:
    """A contract deployed as a side effect of another creation (e.g. a ProxyAdmin)."""

    address: str
    contract_name: Optional[str] = None


@dataclass
class DeploymentTransaction:
    """One transaction from a broadcast file."""

    kind: str  # "CREATE", "CREATE2", "CALL", ...
    contract_name: Optional[str]  # None when the name was ambiguous at compile time
    contract_address: str
    transaction_hash: str
    input: Optional[str] = None  # Creation bytecode + encoded args, hex
    arguments: Optional[List[Any]] = None  # Positional constructor arguments
    additional_contracts: List[AdditionalContract] = field(default_factory=list)


@dataclass
class Batch:
    """A single broadcast run: its transactions plus timestamp and commit."""

    transactions: List[DeploymentTransaction]
    timestamp: int
    commit: str
    chain_id: Optional[int] = None


@dataclass(frozen=True, kw_only=True)
class ContractRecord:
    """Fields shared by every recorded contract."""

    address: str
    deployment_tx_hash: str
    initcode_hash: Optional[str] = None
    version: Optional[str] = None
    # Only populated in history entries
    constructor_inputs: Optional[Dict[str, Any]] = None
    # Only stamped on latest entries
    timestamp: Optional[int] = None
    commit_hash: Optional[str] = None

    def summary(self, timestamp: int, commit_hash: str) -> "ContractRecord":
        """Return the form stored in `latest`: no constructor inputs, batch stamp on."""
        return replace(
            self, constructor_inputs=None, timestamp=timestamp, commit_hash=commit_hash
        )


@dataclass(frozen=True, kw_only=True)
class PlainRecord(ContractRecord):
    """A non-upgradeable contract."""


@dataclass(frozen=True, kw_only=True)
class ProxyRecord(ContractRecord):
    """
    A contract behind a TransparentUpgradeableProxy.

    `address` is the proxy's address and stays fixed across upgrades; the
    implementation, version, initcode hash and constructor inputs describe
    the current implementation.
    """

    implementation: str
    proxy_type: str = PROXY_TYPE
    proxy_admin: Optional[str] = None
    initialize_args: Optional[Any] = None


@dataclass
class HistoryEntry:
    """Contracts recorded by one merged batch."""

    contracts: Dict[str, ContractRecord]
    timestamp: int
    commit_hash: str


@dataclass
class Ledger:
    """Everything persisted for one chain."""

    chain_id: Any
    latest: Dict[str, ContractRecord] = field(default_factory=dict)
    history: List[HistoryEntry] = field(default_factory=list)
