"""Main API for forge-chronicles library."""

import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Union

from .artifacts import ArtifactSource, ForgeArtifacts
from .chain import ChainReader, RpcChainReader
from .constants import (
    DEFAULT_BROADCAST_DIR,
    DEFAULT_CHAIN_ID,
    DEFAULT_OUT_DIR,
    DEFAULT_RECORDS_DIR,
    DEFAULT_SCRIPT_NAME,
    RPC_URL_ENV,
)
from .exceptions import ContractNotFoundError, LedgerNotFoundError
from .keys import base_name
from .merger import ensure_unprocessed, merge_batch
from .parsers import parse_broadcast
from .paths import get_broadcast_path, get_ledger_path, get_project_root
from .storage import load_ledger, read_ledger, save_ledger
from .tags import TagLabels, apply_duplicate_tags, apply_duplicate_tags_to_history
from .types import ContractRecord, HistoryEntry, Ledger

logger = logging.getLogger(__name__)


class DeploymentRecords:
    """Read-only access to a chain's deployment ledger."""

    def __init__(self, ledger_path: Union[Path, str]):
        """
        Load a ledger written by extract_and_save().

        Args:
            ledger_path: Path to <chainId>.json

        Raises:
            LedgerNotFoundError: If the ledger file does not exist
        """
        path = Path(ledger_path)
        try:
            self._ledger = read_ledger(path)
        except FileNotFoundError as e:
            raise LedgerNotFoundError(
                f"Deployment ledger not found at {path}. Run extract_and_save() to create it."
            ) from e

    @classmethod
    def for_chain(
        cls,
        chain_id: Union[int, str],
        project_root: Optional[Union[Path, str]] = None,
        records_dir: str = DEFAULT_RECORDS_DIR,
    ) -> "DeploymentRecords":
        """Open the ledger of a chain inside a Foundry project."""
        return cls(get_ledger_path(get_project_root(project_root), chain_id, records_dir))

    @property
    def chain_id(self) -> Any:
        return self._ledger.chain_id

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def contract_names(self) -> List[str]:
        """
        Get the display keys of all currently deployed contracts.

        Returns:
            List of keys (e.g., ["Token", "Vault#v1", "Vault"])
        """
        return list(self._ledger.latest.keys())

    def has_contract(self, contract_name: str) -> bool:
        """Check if a display key is present in latest."""
        return contract_name in self._ledger.latest

    def contract(self, contract_name: str) -> ContractRecord:
        """
        Get the current record of a contract.

        Args:
            contract_name: Display key, e.g. "Vault" or "Vault#v1"

        Returns:
            PlainRecord or ProxyRecord

        Raises:
            ContractNotFoundError: If the key is not in latest
        """
        if contract_name not in self._ledger.latest:
            raise ContractNotFoundError(
                f"Contract '{contract_name}' not found on chain {self.chain_id}"
            )
        return self._ledger.latest[contract_name]

    def history(self) -> List[HistoryEntry]:
        """Get all merged batches, newest first."""
        return list(self._ledger.history)

    def latest_commit(self) -> Optional[str]:
        """Get the commit of the most recent merged batch, if any."""
        if not self._ledger.history:
            return None
        return self._ledger.history[0].commit_hash

    def deployments_of(self, contract_name: str) -> List[ContractRecord]:
        """
        Get every historical record of a contract, newest first.

        All tags of the same base name are included, so "Vault" also
        returns records stored as "Vault#v1".
        """
        wanted = base_name(contract_name)
        return [
            record
            for entry in self._ledger.history
            for key, record in entry.contracts.items()
            if base_name(key) == wanted
        ]


def extract_and_save(
    script_name: str = DEFAULT_SCRIPT_NAME,
    chain_id: Union[int, str] = DEFAULT_CHAIN_ID,
    rpc_url: Optional[str] = None,
    force: bool = False,
    project_root: Optional[Union[Path, str]] = None,
    broadcast_dir: str = DEFAULT_BROADCAST_DIR,
    out_dir: str = DEFAULT_OUT_DIR,
    records_dir: str = DEFAULT_RECORDS_DIR,
    labels: Optional[TagLabels] = None,
    artifacts: Optional[ArtifactSource] = None,
    chain: Optional[ChainReader] = None,
) -> Optional[Ledger]:
    """
    Record the latest broadcast of a deploy script in the chain's ledger.

    Reads <broadcast_dir>/<script>/<chain>/run-latest.json, merges it into
    <records_dir>/<chain>.json and writes the result. Nothing is written
    unless the batch records at least one contract.

    Args:
        script_name: Forge script file name (e.g. "Deploy.s.sol")
        chain_id: Chain the script was broadcast to
        rpc_url: RPC endpoint (defaults to $ETH_RPC_URL); without one,
                 versions are skipped and upgrades cannot be verified
        force: Re-process a commit that is already the newest history entry
        project_root: Foundry project directory (defaults to current directory)
        broadcast_dir: Broadcast directory relative to project root
        out_dir: Forge output directory relative to project root
        records_dir: Ledger directory relative to project root
        labels: Tags for contracts sharing a name
        artifacts: ABI source (defaults to ForgeArtifacts, which runs forge build)
        chain: Chain reader (defaults to RpcChainReader on rpc_url)

    Returns:
        The ledger that was written, or None if there was nothing new

    Raises:
        BroadcastNotFoundError: If the broadcast file is missing
        CommitAlreadyProcessedError: If the commit was already processed
        ArtifactBuildError: If forge build fails
        ConstructorMismatchError: If constructor arguments don't match an ABI
        UpgradeVerificationError: If a proxy upgrade can't be confirmed on-chain
    """
    root = get_project_root(project_root)

    if rpc_url is None:
        rpc_url = os.environ.get(RPC_URL_ENV)
    if chain is None:
        chain = RpcChainReader(rpc_url)
    if artifacts is None:
        artifacts = ForgeArtifacts(root, out_dir)

    batch = parse_broadcast(get_broadcast_path(root, script_name, chain_id, broadcast_dir))
    ledger_path = get_ledger_path(root, chain_id, records_dir)
    ledger = load_ledger(ledger_path, chain_id)

    # Fail before compiling if the batch was already merged
    ensure_unprocessed(ledger, batch.commit, force)

    artifacts.build()

    candidate = merge_batch(ledger, batch, artifacts, chain, force=force)
    if candidate is None:
        return None

    candidate.latest = apply_duplicate_tags(candidate.latest, labels)
    candidate.history = apply_duplicate_tags_to_history(candidate.history, labels)

    save_ledger(candidate, ledger_path)
    logger.info(f"Recorded commit {batch.commit} in {ledger_path}")
    return candidate
