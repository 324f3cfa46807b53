"""Proxy/implementation linkage for forge-chronicles library."""

from typing import Any, Dict, List, Optional

from .constants import PROXY_TYPE
from .keys import base_name
from .types import ContractRecord, DeploymentTransaction, HistoryEntry, PlainRecord, ProxyRecord


def is_proxy_event(event: DeploymentTransaction) -> bool:
    """Check whether a creation deploys the supported proxy contract."""
    return event.contract_name == PROXY_TYPE


def proxy_target(event: DeploymentTransaction) -> Optional[str]:
    """Return the implementation address a proxy was constructed with (first argument)."""
    if not event.arguments:
        return None
    return str(event.arguments[0])


def find_linked_proxies(events: List[DeploymentTransaction], index: int) -> List[int]:
    """
    Find proxies created later in the batch that point at the event at `index`.

    Only events after `index` are searched, so the result depends on nothing
    but the batch itself.

    Args:
        events: Classified creation events, in broadcast order
        index: Position of the implementation event

    Returns:
        Indices of every matching proxy event, in order. One implementation
        may back several proxies.
    """
    implementation = events[index].contract_address.lower()
    matches: List[int] = []
    for j in range(index + 1, len(events)):
        candidate = events[j]
        if not is_proxy_event(candidate):
            continue
        target = proxy_target(candidate)
        if target is not None and target.lower() == implementation:
            matches.append(j)
    return matches


def build_plain_record(
    event: DeploymentTransaction,
    initcode_hash: Optional[str],
    constructor_inputs: Dict[str, Any],
    version: Optional[str],
) -> PlainRecord:
    """Record a standalone (or redeployed) contract under its own address."""
    return PlainRecord(
        address=event.contract_address,
        deployment_tx_hash=event.transaction_hash,
        initcode_hash=initcode_hash,
        version=version,
        constructor_inputs=constructor_inputs,
    )


def build_proxy_record(
    implementation_event: DeploymentTransaction,
    proxy_event: DeploymentTransaction,
    initcode_hash: Optional[str],
    constructor_inputs: Dict[str, Any],
    version: Optional[str],
) -> ProxyRecord:
    """
    Record a new implementation deployed behind a new proxy.

    The proxy admin is the first contract the proxy deployed alongside itself,
    and the initializer payload is the proxy's third constructor argument.
    """
    proxy_admin = None
    if proxy_event.additional_contracts:
        proxy_admin = proxy_event.additional_contracts[0].address

    initialize_args = None
    if proxy_event.arguments and len(proxy_event.arguments) > 2:
        initialize_args = proxy_event.arguments[2]

    return ProxyRecord(
        address=proxy_event.contract_address,
        implementation=implementation_event.contract_address,
        proxy_type=proxy_event.contract_name,
        proxy_admin=proxy_admin,
        deployment_tx_hash=proxy_event.transaction_hash,
        initcode_hash=initcode_hash,
        version=version,
        constructor_inputs=constructor_inputs,
        initialize_args=initialize_args,
    )


def build_upgrade_record(
    current: ProxyRecord,
    event: DeploymentTransaction,
    initcode_hash: Optional[str],
    constructor_inputs: Dict[str, Any],
    version: Optional[str],
) -> ProxyRecord:
    """
    Record a proxy pointing at a new implementation.

    The proxy's identity (address, admin, type, deployment transaction)
    carries over from the current record.
    """
    return ProxyRecord(
        address=current.address,
        implementation=event.contract_address,
        proxy_type=current.proxy_type,
        proxy_admin=current.proxy_admin,
        deployment_tx_hash=current.deployment_tx_hash,
        initcode_hash=initcode_hash,
        version=version,
        constructor_inputs=constructor_inputs,
    )


def is_recorded(
    history: List[HistoryEntry], contract_name: str, event: DeploymentTransaction
) -> bool:
    """
    Check whether any history entry already holds this exact deployment.

    A match is a record under the same base name with the same address and
    deployment transaction hash.
    """
    for entry in history:
        for key, record in entry.contracts.items():
            if base_name(key) != contract_name:
                continue
            if (
                record.address == event.contract_address
                and record.deployment_tx_hash == event.transaction_hash
            ):
                return True
    return False


def find_by_address(latest: Dict[str, ContractRecord], address: str) -> Optional[str]:
    """Return the latest key whose record lives at `address` (case-insensitive)."""
    wanted = address.lower()
    for key, record in latest.items():
        if record.address.lower() == wanted:
            return key
    return None
