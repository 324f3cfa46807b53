"""Unit tests for ledger persistence."""

import json
from pathlib import Path

import pytest

from forge_chronicles.storage import (
    ledger_from_dict,
    ledger_to_dict,
    load_ledger,
    read_ledger,
    record_from_dict,
    record_to_dict,
    save_ledger,
)
from forge_chronicles.types import HistoryEntry, Ledger, PlainRecord, ProxyRecord

PROXY = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
IMPL = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
ADMIN = "0xcccccccccccccccccccccccccccccccccccccccc"


class TestRecordSerialization:
    """Test conversion between records and ledger JSON."""

    def test_proxy_record_fields(self):
        """Test JSON field names of a proxy record in history."""
        record = ProxyRecord(
            address=PROXY,
            implementation=IMPL,
            proxy_admin=ADMIN,
            deployment_tx_hash="0xp1",
            initcode_hash="ab" * 32,
            version="1.0.0",
            constructor_inputs={"owner": ADMIN},
            initialize_args="0x8129fc1c",
        )

        data = record_to_dict(record)

        assert data == {
            "implementation": IMPL,
            "address": PROXY,
            "proxy": True,
            "version": "1.0.0",
            "proxyType": "TransparentUpgradeableProxy",
            "deploymentTxn": "0xp1",
            "proxyAdmin": ADMIN,
            "initcodeHash": "ab" * 32,
            "input": {"constructor": {"owner": ADMIN}, "initializeData": "0x8129fc1c"},
        }

    def test_latest_summary_has_no_constructor_inputs(self):
        """Test that latest records carry the batch stamp instead of constructor inputs."""
        record = PlainRecord(
            address=IMPL,
            deployment_tx_hash="0xh1",
            initcode_hash="ab" * 32,
            constructor_inputs={"a": 1},
        ).summary(1700000000, "abc1234")

        data = record_to_dict(record)

        assert "input" not in data
        assert data["timestamp"] == 1700000000
        assert data["commitHash"] == "abc1234"
        assert data["proxy"] is False

    def test_unknown_version_is_omitted(self):
        """Test that None values are not written."""
        data = record_to_dict(PlainRecord(address=IMPL, deployment_tx_hash="0xh1"))

        assert "version" not in data
        assert "initcodeHash" not in data

    def test_proxy_flag_selects_variant(self):
        """Test that decoding is driven by the proxy flag."""
        proxy = record_from_dict(
            {"implementation": IMPL, "address": PROXY, "proxy": True, "deploymentTxn": "0xp1"}
        )
        plain = record_from_dict({"address": IMPL, "proxy": False, "deploymentTxn": "0xh1"})

        assert isinstance(proxy, ProxyRecord)
        assert proxy.proxy_type == "TransparentUpgradeableProxy"
        assert isinstance(plain, PlainRecord)

    def test_legacy_empty_strings_read_as_none(self):
        """Test records written with empty placeholders."""
        record = record_from_dict(
            {
                "address": IMPL,
                "proxy": True,
                "implementation": IMPL,
                "version": "",
                "proxyAdmin": "",
                "deploymentTxn": "0xh1",
                "initcodeHash": "",
            }
        )

        assert record.version is None
        assert record.proxy_admin is None
        assert record.initcode_hash is None

    def test_roundtrip_preserves_records(self):
        """Test a ledger survives serialization."""
        record = PlainRecord(address=IMPL, deployment_tx_hash="0xh1", constructor_inputs={})
        ledger = Ledger(
            chain_id=1,
            latest={"Token": record.summary(5, "c")},
            history=[HistoryEntry(contracts={"Token#abababab": record}, timestamp=5, commit_hash="c")],
        )

        assert ledger_from_dict(ledger_to_dict(ledger)) == ledger


class TestReadLedger:
    """Test the read_ledger function."""

    def test_reads_saved_ledger(self, tmp_path: Path):
        """Test that a saved ledger is read back."""
        path = tmp_path / "1.json"
        save_ledger(Ledger(chain_id=1), path)

        assert read_ledger(path) == Ledger(chain_id=1)

    def test_missing_file_raises(self, tmp_path: Path):
        """Test that a missing ledger is an error rather than an empty ledger."""
        with pytest.raises(FileNotFoundError):
            read_ledger(tmp_path / "1.json")


class TestLoadLedger:
    """Test the load_ledger function."""

    def test_missing_file_gives_empty_ledger(self, tmp_path: Path):
        """Test that a missing ledger starts empty with the requested chain id."""
        ledger = load_ledger(tmp_path / "1.json", 1)

        assert ledger == Ledger(chain_id=1)

    def test_corrupted_file_raises(self, tmp_path: Path):
        """Test that a corrupted ledger is never silently replaced."""
        path = tmp_path / "1.json"
        path.write_text("{ invalid json")

        with pytest.raises(json.JSONDecodeError):
            load_ledger(path, 1)


class TestSaveLedger:
    """Test the save_ledger function."""

    def test_creates_parent_directories(self, tmp_path: Path):
        """Test that nested directories are created."""
        path = tmp_path / "deployments" / "json" / "1.json"

        save_ledger(Ledger(chain_id=1), path)

        assert json.loads(path.read_text()) == {"chainId": 1, "latest": {}, "history": []}

    def test_overwrites_without_leftovers(self, tmp_path: Path):
        """Test that the file is replaced and no temp file remains."""
        path = tmp_path / "1.json"
        path.write_text('{"old": "data"}')

        save_ledger(Ledger(chain_id=1), path)

        assert "old" not in json.loads(path.read_text())
        assert [p.name for p in tmp_path.iterdir()] == ["1.json"]

    def test_uses_two_space_indent(self, tmp_path: Path):
        """Test the on-disk formatting."""
        path = tmp_path / "1.json"
        save_ledger(Ledger(chain_id=1), path)

        assert path.read_text() == json.dumps({"chainId": 1, "latest": {}, "history": []}, indent=2)
