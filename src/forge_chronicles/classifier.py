"""Transaction classification for forge-chronicles library."""

import logging
from typing import List

from .constants import CREATE_KINDS
from .types import DeploymentTransaction

logger = logging.getLogger(__name__)


def is_creation(transaction: DeploymentTransaction) -> bool:
    """Check whether a broadcast transaction deploys a contract."""
    return transaction.kind in CREATE_KINDS


def classify_transactions(
    transactions: List[DeploymentTransaction],
) -> List[DeploymentTransaction]:
    """
    Reduce a broadcast batch to the creation events that can be recorded.

    Order is preserved: proxy linkage looks ahead within this list.
    Creations without a contract name (not unique or not found at compile
    time) cannot be attributed and are dropped.

    Args:
        transactions: All transactions of a batch, in broadcast order

    Returns:
        CREATE/CREATE2 transactions with a known contract name
    """
    creations: List[DeploymentTransaction] = []
    for transaction in transactions:
        if not is_creation(transaction):
            continue
        if transaction.contract_name is None:
            logger.info(
                f"Contract name not unique or not found for {transaction.contract_address}. Skipping."
            )
            continue
        creations.append(transaction)
    return creations
