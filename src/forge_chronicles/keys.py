"""Initcode hashing and display-key helpers for forge-chronicles library."""

import re
from typing import Optional

from eth_utils import keccak

from .constants import SHORT_HASH_LENGTH, TAG_SEPARATOR

_AUTO_TAG_PATTERN = re.compile(rf"^[0-9a-f]{{{SHORT_HASH_LENGTH}}}$", re.IGNORECASE)


def compute_initcode_hash(initcode: Optional[str]) -> Optional[str]:
    """
    Compute the keccak256 digest of a contract's creation bytecode.

    Args:
        initcode: Hex string, with or without 0x prefix

    Returns:
        Full 64-char lowercase hex digest without 0x prefix,
        or None if no initcode is available
    """
    if initcode is None:
        return None
    return keccak(hexstr=initcode).hex()


def short_hash(full_hash: str) -> str:
    """Return the 4-byte prefix of an initcode hash used in display keys."""
    return full_hash[:SHORT_HASH_LENGTH]


def storage_key(contract_name: str, initcode_hash: Optional[str]) -> str:
    """
    Build the key a new record is stored under within one batch.

    Distinct bytecode under the same name never collides, e.g.
    ("Token", "ab12cd34ef...") -> "Token#ab12cd34".
    """
    if initcode_hash:
        return f"{contract_name}{TAG_SEPARATOR}{short_hash(initcode_hash)}"
    return contract_name


def base_name(key: str) -> str:
    """Strip any tag from a display key."""
    return key.split(TAG_SEPARATOR)[0]


def existing_tag(key: str) -> Optional[str]:
    """Return the tag part of a display key, or None for a bare name."""
    if TAG_SEPARATOR not in key:
        return None
    return key.split(TAG_SEPARATOR)[1]


def is_auto_generated_tag(tag: Optional[str]) -> bool:
    """Check whether a tag is a short hash rather than a human-chosen label."""
    return bool(tag) and _AUTO_TAG_PATTERN.match(tag) is not None
