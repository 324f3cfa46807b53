"""Ledger persistence for forge-chronicles library."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

from .constants import PROXY_TYPE
from .types import ContractRecord, HistoryEntry, Ledger, PlainRecord, ProxyRecord


def record_to_dict(record: ContractRecord) -> Dict[str, Any]:
    """
    Serialize a record using the ledger's JSON field names.

    Unknown values (version, proxy admin, stamps) are omitted rather than
    written as null.
    """
    data: Dict[str, Any] = {}
    if isinstance(record, ProxyRecord):
        data["implementation"] = record.implementation
    data["address"] = record.address
    data["proxy"] = isinstance(record, ProxyRecord)
    if record.version is not None:
        data["version"] = record.version
    if isinstance(record, ProxyRecord):
        data["proxyType"] = record.proxy_type
    data["deploymentTxn"] = record.deployment_tx_hash
    if isinstance(record, ProxyRecord) and record.proxy_admin is not None:
        data["proxyAdmin"] = record.proxy_admin
    if record.initcode_hash is not None:
        data["initcodeHash"] = record.initcode_hash

    inputs: Dict[str, Any] = {}
    if record.constructor_inputs is not None:
        inputs["constructor"] = record.constructor_inputs
    if isinstance(record, ProxyRecord) and record.initialize_args is not None:
        inputs["initializeData"] = record.initialize_args
    if inputs:
        data["input"] = inputs

    if record.timestamp is not None:
        data["timestamp"] = record.timestamp
    if record.commit_hash is not None:
        data["commitHash"] = record.commit_hash
    return data


def record_from_dict(data: Dict[str, Any]) -> ContractRecord:
    """
    Deserialize a record; the `proxy` flag selects the variant.

    Empty strings left by older ledgers (e.g. "version": "") are read as None.
    """
    inputs = data.get("input") or {}
    common: Dict[str, Any] = {
        "address": data["address"],
        "deployment_tx_hash": data.get("deploymentTxn", ""),
        "initcode_hash": data.get("initcodeHash") or None,
        "version": data.get("version") or None,
        "constructor_inputs": inputs.get("constructor"),
        "timestamp": data.get("timestamp"),
        "commit_hash": data.get("commitHash"),
    }

    if data.get("proxy"):
        return ProxyRecord(
            implementation=data.get("implementation", ""),
            proxy_type=data.get("proxyType") or PROXY_TYPE,
            proxy_admin=data.get("proxyAdmin") or None,
            initialize_args=inputs.get("initializeData"),
            **common,
        )
    return PlainRecord(**common)


def ledger_to_dict(ledger: Ledger) -> Dict[str, Any]:
    """Serialize a ledger to the persisted document structure."""
    return {
        "chainId": ledger.chain_id,
        "latest": {key: record_to_dict(record) for key, record in ledger.latest.items()},
        "history": [
            {
                "contracts": {
                    key: record_to_dict(record) for key, record in entry.contracts.items()
                },
                "timestamp": entry.timestamp,
                "commitHash": entry.commit_hash,
            }
            for entry in ledger.history
        ],
    }


def ledger_from_dict(data: Dict[str, Any]) -> Ledger:
    """Deserialize a persisted ledger document."""
    return Ledger(
        chain_id=data.get("chainId"),
        latest={key: record_from_dict(value) for key, value in data.get("latest", {}).items()},
        history=[
            HistoryEntry(
                contracts={
                    key: record_from_dict(value)
                    for key, value in entry.get("contracts", {}).items()
                },
                timestamp=entry["timestamp"],
                commit_hash=entry.get("commitHash"),
            )
            for entry in data.get("history", [])
        ],
    )


def read_ledger(ledger_path: Union[Path, str]) -> Ledger:
    """
    Read an existing ledger file.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is corrupted
    """
    with open(ledger_path) as f:
        return ledger_from_dict(json.load(f))


def load_ledger(ledger_path: Path, chain_id: Any) -> Ledger:
    """
    Load a chain's ledger or start an empty one.

    Args:
        ledger_path: Path to <chainId>.json
        chain_id: Chain id recorded in a newly created ledger

    Returns:
        Existing ledger, or an empty ledger if the file doesn't exist

    Raises:
        json.JSONDecodeError: If the file exists but is corrupted
    """
    try:
        return read_ledger(ledger_path)
    except FileNotFoundError:
        return Ledger(chain_id=chain_id)


def save_ledger(ledger: Ledger, ledger_path: Union[Path, str]) -> None:
    """
    Write a ledger to disk, replacing any previous file in one step.

    Args:
        ledger: Ledger to persist
        ledger_path: Destination path

    Creates parent directories if they don't exist.
    """
    ledger_path = Path(ledger_path)
    ledger_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=ledger_path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(ledger_to_dict(ledger), f, indent=2)
        os.replace(tmp_name, ledger_path)
    except BaseException:
        os.unlink(tmp_name)
        raise
