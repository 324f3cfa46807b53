"""Merging a broadcast batch into a chain's ledger for forge-chronicles library."""

import logging
from typing import Dict, List, Optional, Set

from .abi import match_constructor_inputs
from .artifacts import ArtifactSource
from .chain import ChainReader
from .classifier import classify_transactions
from .exceptions import CommitAlreadyProcessedError, UpgradeVerificationError
from .keys import compute_initcode_hash, storage_key
from .linker import (
    build_plain_record,
    build_proxy_record,
    build_upgrade_record,
    find_by_address,
    find_linked_proxies,
    is_proxy_event,
    is_recorded,
)
from .types import Batch, ContractRecord, DeploymentTransaction, HistoryEntry, Ledger, ProxyRecord

logger = logging.getLogger(__name__)


def ensure_unprocessed(ledger: Ledger, commit: str, force: bool = False) -> None:
    """
    Refuse to merge a batch whose commit is already the newest history entry.

    Raises:
        CommitAlreadyProcessedError: If the commit was processed and force is False
    """
    if force or not ledger.history:
        return
    if ledger.history[0].commit_hash == commit:
        raise CommitAlreadyProcessedError(f"Commit {commit} already processed. Aborted.")


def _records_for_event(
    events: List[DeploymentTransaction],
    index: int,
    latest: Dict[str, ContractRecord],
    artifacts: ArtifactSource,
    chain: ChainReader,
    claimed: Set[int],
) -> List[ContractRecord]:
    """Build the record(s) one non-proxy creation produces."""
    event = events[index]
    name = event.contract_name
    initcode_hash = compute_initcode_hash(event.input)
    constructor_inputs = match_constructor_inputs(artifacts.load_abi(name), event.arguments)

    current = latest.get(name)
    if (
        isinstance(current, ProxyRecord)
        and current.implementation.lower() == event.contract_address.lower()
    ):
        # Forced re-run of the deployment behind this proxy, not an upgrade
        current = None

    if isinstance(current, ProxyRecord):
        # Upgrade: must be visible on-chain before it is recorded
        implementation = chain.implementation_of(current.address)
        if implementation.lower() != event.contract_address.lower():
            raise UpgradeVerificationError(
                f"{name} not upgraded to {event.contract_address} "
                f"(proxy {current.address} points at {implementation}). Aborted."
            )
        return [
            build_upgrade_record(
                current,
                event,
                initcode_hash,
                constructor_inputs,
                chain.version_of(current.address),
            )
        ]

    if current is not None:
        # Redeployed non-upgradeable contract replaces the previous one
        return [
            build_plain_record(
                event, initcode_hash, constructor_inputs, chain.version_of(event.contract_address)
            )
        ]

    proxy_indices = find_linked_proxies(events, index)
    if not proxy_indices:
        return [
            build_plain_record(
                event, initcode_hash, constructor_inputs, chain.version_of(event.contract_address)
            )
        ]

    records: List[ContractRecord] = []
    for j in proxy_indices:
        proxy_event = events[j]
        claimed.add(j)
        records.append(
            build_proxy_record(
                event,
                proxy_event,
                initcode_hash,
                constructor_inputs,
                chain.version_of(proxy_event.contract_address),
            )
        )
    return records


def merge_batch(
    ledger: Ledger,
    batch: Batch,
    artifacts: ArtifactSource,
    chain: ChainReader,
    force: bool = False,
) -> Optional[Ledger]:
    """
    Build the ledger that results from applying a batch.

    The input ledger is left untouched. Keys of the returned ledger are raw
    storage keys ("Name#<short hash>"); run the tag resolver before saving.

    Args:
        ledger: Previously persisted ledger
        batch: Parsed broadcast batch
        artifacts: Source of contract ABIs
        chain: Reader used for versions and upgrade verification
        force: Merge even if the commit was already processed, re-recording
            contracts already present in history

    Returns:
        Candidate ledger, or None if the batch records nothing new

    Raises:
        CommitAlreadyProcessedError: If the commit was already processed
        ConstructorMismatchError: If constructor arguments don't match an ABI
        UpgradeVerificationError: If a proxy upgrade can't be confirmed on-chain
    """
    ensure_unprocessed(ledger, batch.commit, force)

    events = classify_transactions(batch.transactions)
    latest: Dict[str, ContractRecord] = dict(ledger.latest)
    new_records: Dict[str, ContractRecord] = {}
    claimed: Set[int] = set()

    for index, event in enumerate(events):
        name = event.contract_name

        if is_proxy_event(event):
            if index in claimed:
                continue
            if find_by_address(latest, event.contract_address) is None:
                logger.warning(f"Unexpected proxy {event.contract_address}. Skipping.")
            continue

        if not force and is_recorded(ledger.history, name, event):
            logger.info(f"Skipping duplicate contract {name} at {event.contract_address}.")
            continue

        for record in _records_for_event(events, index, latest, artifacts, chain, claimed):
            key = storage_key(name, record.initcode_hash)
            if key in new_records:
                logger.warning(f"{key} recorded more than once in this batch; keeping the last.")
            new_records[key] = record
            latest[key] = record.summary(batch.timestamp, batch.commit)

    if not new_records:
        logger.info("No new contracts found.")
        return None

    history = [HistoryEntry(new_records, batch.timestamp, batch.commit)] + list(ledger.history)
    history.sort(key=lambda entry: entry.timestamp, reverse=True)

    return Ledger(chain_id=ledger.chain_id, latest=latest, history=history)
