"""
forge-chronicles: Python library for recording Foundry deployments per chain
"""

from importlib.metadata import PackageNotFoundError, version

from .artifacts import ArtifactSource, ForgeArtifacts
from .chain import ChainReader, RpcChainReader
from .deployments import DeploymentRecords, extract_and_save
from .exceptions import (
    ArtifactBuildError,
    ArtifactNotFoundError,
    BroadcastNotFoundError,
    ChainReaderUnavailableError,
    ChronicleError,
    CommitAlreadyProcessedError,
    ConstructorMismatchError,
    ContractNotFoundError,
    LedgerNotFoundError,
    UpgradeVerificationError,
)
from .merger import merge_batch
from .tags import TagLabels, parse_tag_labels
from .types import (
    Batch,
    ContractRecord,
    DeploymentTransaction,
    HistoryEntry,
    Ledger,
    PlainRecord,
    ProxyRecord,
)

try:
    __version__ = version("forge-chronicles")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "extract_and_save",
    "merge_batch",
    "DeploymentRecords",
    "ArtifactSource",
    "ForgeArtifacts",
    "ChainReader",
    "RpcChainReader",
    "TagLabels",
    "parse_tag_labels",
    "Batch",
    "DeploymentTransaction",
    "ContractRecord",
    "PlainRecord",
    "ProxyRecord",
    "HistoryEntry",
    "Ledger",
    "ChronicleError",
    "CommitAlreadyProcessedError",
    "ConstructorMismatchError",
    "UpgradeVerificationError",
    "ChainReaderUnavailableError",
    "ArtifactBuildError",
    "ArtifactNotFoundError",
    "BroadcastNotFoundError",
    "LedgerNotFoundError",
    "ContractNotFoundError",
]
