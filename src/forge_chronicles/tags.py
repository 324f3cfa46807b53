"""Disambiguating tags for same-named contracts in forge-chronicles library."""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Set

from .constants import TAG_SEPARATOR
from .keys import base_name, existing_tag, is_auto_generated_tag, short_hash
from .types import ContractRecord, HistoryEntry

logger = logging.getLogger(__name__)

_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


@dataclass
class TagLabels:
    """
    Operator-supplied labels.

    - by_hash: short (8 hex) or full initcode hash -> label
    - by_address: contract address -> label

    Keys are matched case-insensitively.
    """

    by_hash: Dict[str, str] = field(default_factory=dict)
    by_address: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.by_hash = {key.lower().removeprefix("0x"): label for key, label in self.by_hash.items()}
        self.by_address = {key.lower(): label for key, label in self.by_address.items()}

    def label_for(self, record: ContractRecord) -> Optional[str]:
        """Return the explicit label of a record: address first, then hash."""
        label = self.by_address.get(record.address.lower())
        if label:
            return label
        if record.initcode_hash:
            full = record.initcode_hash.lower()
            return self.by_hash.get(short_hash(full)) or self.by_hash.get(full)
        return None


def parse_tag_labels(entries: Iterable[str]) -> TagLabels:
    """
    Parse "<hash-or-address>:<label>" strings into TagLabels.

    Args:
        entries: e.g. ["ab12cd34:v1", "0x5FbDB2315678afecb367f032d93F642f64180aa3:legacy"]

    Returns:
        TagLabels with address keys (0x + 40 hex) and hash keys split apart

    Raises:
        ValueError: If an entry has no ":" separator or an empty side
    """
    by_hash: Dict[str, str] = {}
    by_address: Dict[str, str] = {}
    for entry in entries:
        key, sep, label = entry.partition(":")
        key, label = key.strip(), label.strip()
        if not sep or not key or not label:
            raise ValueError(f"Invalid tag '{entry}': expected <hash-or-address>:<label>")
        if _ADDRESS_PATTERN.match(key):
            by_address[key] = label
        else:
            by_hash[key] = label
    return TagLabels(by_hash=by_hash, by_address=by_address)


def _preserved_tag(key: str) -> Optional[str]:
    """Return the key's tag if a human chose it (i.e. it is not a short hash)."""
    tag = existing_tag(key)
    if tag and not is_auto_generated_tag(tag):
        return tag
    return None


def _tagged(name: str, tag: str) -> str:
    return f"{name}{TAG_SEPARATOR}{tag}"


def apply_duplicate_tags(
    latest: Dict[str, ContractRecord], labels: Optional[TagLabels] = None
) -> Dict[str, ContractRecord]:
    """
    Rename `latest` entries so same-named contracts are told apart.

    Per entry, the tag comes from an explicit label, else from a
    human-chosen tag already on the key. Entries without a tag go under
    the bare name; when one name holds several initcode hashes, the last
    such entry wins the bare key.

    Args:
        latest: Latest map, keyed by storage key or display key
        labels: Operator-supplied labels

    Returns:
        New latest map keyed by display key
    """
    labels = labels or TagLabels()

    groups: Dict[str, List[str]] = {}
    for key in latest:
        groups.setdefault(base_name(key), []).append(key)

    renamed: Dict[str, ContractRecord] = {}
    for name, keys in groups.items():
        hashes = {latest[key].initcode_hash for key in keys if latest[key].initcode_hash}
        has_conflict = len(hashes) > 1

        for key in keys:
            record = latest[key]
            tag = labels.label_for(record) or _preserved_tag(key)
            if tag:
                renamed[_tagged(name, tag)] = record
                continue

            if has_conflict and name in renamed:
                hint = short_hash(record.initcode_hash) if record.initcode_hash else "unknown"
                logger.warning(
                    f'Conflict detected for "{name}" (hash: {hint}). Overwriting previous entry. '
                    f"Tag {hint}:<label> to preserve both."
                )
            renamed[name] = record

    return renamed


def conflicting_names(history: List[HistoryEntry]) -> Set[str]:
    """Return base names recorded with more than one initcode hash across all of history."""
    hashes: Dict[str, Set[str]] = {}
    for entry in history:
        for key, record in entry.contracts.items():
            seen = hashes.setdefault(base_name(key), set())
            if record.initcode_hash:
                seen.add(record.initcode_hash)
    return {name for name, seen in hashes.items() if len(seen) > 1}


def apply_duplicate_tags_to_history(
    history: List[HistoryEntry], labels: Optional[TagLabels] = None
) -> List[HistoryEntry]:
    """
    Rename history keys where disambiguation is needed.

    A record is tagged when its name was ever recorded with distinct
    bytecode, when it has an explicit label, or when its key is already
    tagged. Unlabelled records fall back to their short hash. Record
    content is never changed.

    Args:
        history: History entries, newest first
        labels: Operator-supplied labels

    Returns:
        New list of entries in the same order
    """
    labels = labels or TagLabels()
    conflicts = conflicting_names(history)

    retagged: List[HistoryEntry] = []
    for entry in history:
        contracts: Dict[str, ContractRecord] = {}
        for key, record in entry.contracts.items():
            name = base_name(key)
            label = labels.label_for(record)

            if name not in conflicts and not label and TAG_SEPARATOR not in key:
                contracts[name] = record
                continue

            tag = label or _preserved_tag(key)
            if not tag and record.initcode_hash:
                tag = short_hash(record.initcode_hash)

            if tag:
                contracts[_tagged(name, tag)] = record
            else:
                if name in conflicts:
                    logger.warning(
                        f'Legacy entry "{name}" at {record.address} has no initcode hash; '
                        "keeping it untagged."
                    )
                contracts[name] = record
        retagged.append(replace(entry, contracts=contracts))
    return retagged
