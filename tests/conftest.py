"""Shared pytest fixtures for forge-chronicles tests."""

import json
import shutil
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

from forge_chronicles.exceptions import ArtifactBuildError, ChainReaderUnavailableError
from forge_chronicles.types import AdditionalContract, Batch, DeploymentTransaction

IMPL_ADDRESS = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
PROXY_ADDRESS = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
ADMIN_ADDRESS = "0xcccccccccccccccccccccccccccccccccccccccc"
NEW_IMPL_ADDRESS = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
OTHER_ADDRESS = "0xffffffffffffffffffffffffffffffffffffffff"


class FakeChainReader:
    """Deterministic ChainReader: answers from dictionaries, records queries."""

    def __init__(
        self,
        implementations: Optional[Dict[str, str]] = None,
        versions: Optional[Dict[str, str]] = None,
        available: bool = True,
    ):
        self.implementations = {k.lower(): v for k, v in (implementations or {}).items()}
        self.versions = {k.lower(): v for k, v in (versions or {}).items()}
        self.available = available
        self.implementation_queries: List[str] = []

    def version_of(self, address: str) -> Optional[str]:
        return self.versions.get(address.lower())

    def implementation_of(self, address: str) -> str:
        self.implementation_queries.append(address)
        if not self.available or address.lower() not in self.implementations:
            raise ChainReaderUnavailableError(f"No implementation known for {address}")
        return self.implementations[address.lower()]


class FakeArtifacts:
    """Deterministic ArtifactSource: ABIs from a dictionary, no compilation."""

    def __init__(
        self,
        abis: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        fail_build: bool = False,
    ):
        self.abis = abis or {}
        self.fail_build = fail_build
        self.builds = 0

    def build(self) -> None:
        self.builds += 1
        if self.fail_build:
            raise ArtifactBuildError("forge build failed")

    def load_abi(self, contract_name: str) -> List[Dict[str, Any]]:
        return self.abis.get(contract_name, [])


def make_create(
    name: Optional[str],
    address: str,
    tx_hash: str,
    initcode: str = "0x6080",
    arguments: Optional[List[Any]] = None,
    additional: Optional[List[str]] = None,
    kind: str = "CREATE",
) -> DeploymentTransaction:
    return DeploymentTransaction(
        kind=kind,
        contract_name=name,
        contract_address=address,
        transaction_hash=tx_hash,
        input=initcode,
        arguments=arguments,
        additional_contracts=[AdditionalContract(address=a) for a in additional or []],
    )


def make_proxy(
    implementation: str,
    address: str = PROXY_ADDRESS,
    tx_hash: str = "0xp1",
    admin: Optional[str] = ADMIN_ADDRESS,
    init_data: str = "0x8129fc1c",
) -> DeploymentTransaction:
    return make_create(
        "TransparentUpgradeableProxy",
        address,
        tx_hash,
        initcode="0x60806040526040516110",
        arguments=[implementation, "0x9999999999999999999999999999999999999999", init_data],
        additional=[admin] if admin else [],
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def create_tx() -> Callable[..., DeploymentTransaction]:
    """Factory for creation transactions."""
    return make_create


@pytest.fixture
def proxy_tx() -> Callable[..., DeploymentTransaction]:
    """Factory for TransparentUpgradeableProxy creations."""
    return make_proxy


@pytest.fixture
def batch_factory() -> Callable[..., Batch]:
    """Factory for batches with a given timestamp and commit."""

    def _make(
        transactions: List[DeploymentTransaction],
        timestamp: int = 1700000000,
        commit: str = "abc1234",
    ) -> Batch:
        return Batch(transactions=transactions, timestamp=timestamp, commit=commit)

    return _make


@pytest.fixture
def chain_reader() -> FakeChainReader:
    """Chain reader that knows nothing (version lookups return None)."""
    return FakeChainReader()


@pytest.fixture
def artifacts() -> FakeArtifacts:
    """Artifact source with no constructors."""
    return FakeArtifacts()


@pytest.fixture
def counter_abi(fixtures_dir: Path) -> List[Dict[str, Any]]:
    """Load the sample Counter ABI (address + tuple constructor)."""
    with open(fixtures_dir / "out" / "Counter.sol" / "Counter.json") as f:
        return json.load(f)["abi"]


@pytest.fixture
def foundry_project(tmp_path: Path, fixtures_dir: Path) -> Path:
    """Create a temporary Foundry project with a broadcast file and out/ dir."""
    project = tmp_path / "project"
    shutil.copytree(fixtures_dir / "broadcast", project / "broadcast")
    shutil.copytree(fixtures_dir / "out", project / "out")
    return project


@pytest.fixture
def chain_factory() -> Callable[..., FakeChainReader]:
    """Factory for chain readers with known implementations/versions."""
    return FakeChainReader


@pytest.fixture
def artifacts_factory() -> Callable[..., FakeArtifacts]:
    """Factory for artifact sources with given ABIs."""
    return FakeArtifacts
