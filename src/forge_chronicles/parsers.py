"""Broadcast file parsers for forge-chronicles library."""

import json
from pathlib import Path
from typing import Any, Dict

from .exceptions import BroadcastNotFoundError
from .types import AdditionalContract, Batch, DeploymentTransaction


def parse_transaction(data: Dict[str, Any]) -> DeploymentTransaction:
    """
    Convert one entry of a broadcast's `transactions` list.

    Args:
        data: Transaction dictionary as written by forge

    Returns:
        DeploymentTransaction with canonical field names
    """
    # Older forge versions write the calldata under "data" instead of "input"
    tx_body = data.get("transaction") or {}
    initcode = tx_body.get("input", tx_body.get("data"))

    additional = [
        AdditionalContract(
            address=extra["address"],
            contract_name=extra.get("contractName"),
        )
        for extra in data.get("additionalContracts") or []
    ]

    return DeploymentTransaction(
        kind=data.get("transactionType", ""),
        contract_name=data.get("contractName"),
        contract_address=data.get("contractAddress") or "",
        transaction_hash=data.get("hash") or "",
        input=initcode,
        arguments=data.get("arguments"),
        additional_contracts=additional,
    )


def parse_broadcast_data(data: Dict[str, Any]) -> Batch:
    """
    Convert a decoded broadcast document into a Batch.

    Args:
        data: Decoded run-latest.json

    Returns:
        Batch with transactions in broadcast order
    """
    return Batch(
        transactions=[parse_transaction(tx) for tx in data.get("transactions", [])],
        timestamp=data["timestamp"],
        commit=data.get("commit"),
        chain_id=data.get("chain"),
    )


def parse_broadcast(file_path: Path) -> Batch:
    """
    Parse a forge broadcast file (run-latest.json).

    Args:
        file_path: Path to broadcast JSON file

    Returns:
        Batch of the run

    Raises:
        BroadcastNotFoundError: If the broadcast file does not exist
    """
    try:
        with open(file_path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise BroadcastNotFoundError(f"Broadcast file not found: {file_path}") from e

    return parse_broadcast_data(data)
