#!/usr/bin/env python3
"""
Tests for the deployment journal
"""

import json
import os

import pytest
from web3 import Web3

from deployment.errors import DeploymentError, JournalError
from deployment.executor import DeploymentReceipt
from deployment.journal import DeploymentJournal

SWITCH_ASSETS_ADDRESS = "0x3897196da6a4f2219ed4f183afa3a10c8c227f23"


class TestDeploymentJournal:
    """Test class for DeploymentJournal"""

    def test_for_chain_directory(self, tmp_path):
        """Test journals are scoped per chain id"""
        journal = DeploymentJournal.for_chain(str(tmp_path), 84532)
        assert journal.deployment_dir == os.path.join(str(tmp_path), "chain-84532")

    def test_empty_journal(self, tmp_path):
        """Test a fresh directory has no deployments"""
        journal = DeploymentJournal(str(tmp_path / "chain-1"))
        assert journal.deployed_addresses() == {}
        assert journal.address_of("SwitchAssetsModule#SwitchAssets") is None
        assert journal.records() == []

    def test_record_writes_both_files(self, tmp_path):
        """Test recording updates deployed_addresses.json and journal.jsonl"""
        journal = DeploymentJournal(str(tmp_path / "chain-84532"))
        receipt = DeploymentReceipt(address=SWITCH_ASSETS_ADDRESS, tx_hash="0xabc", block_number=12)

        journal.record("SwitchAssetsModule#SwitchAssets", "SwitchAssets", receipt)

        checksum = Web3.to_checksum_address(SWITCH_ASSETS_ADDRESS)
        assert journal.address_of("SwitchAssetsModule#SwitchAssets") == checksum
        with open(journal.addresses_path) as f:
            assert json.load(f) == {"SwitchAssetsModule#SwitchAssets": checksum}

        records = journal.records()
        assert len(records) == 1
        assert records[0]["futureId"] == "SwitchAssetsModule#SwitchAssets"
        assert records[0]["artifact"] == "SwitchAssets"
        assert records[0]["txHash"] == "0xabc"
        assert records[0]["blockNumber"] == 12
        assert "timestamp" in records[0]

    def test_records_accumulate(self, tmp_path):
        """Test later records keep earlier addresses"""
        journal = DeploymentJournal(str(tmp_path))
        journal.record("M#A", "A", DeploymentReceipt(address="0x" + "11" * 20))
        journal.record("M#B", "B", DeploymentReceipt(address="0x" + "22" * 20))

        assert set(journal.deployed_addresses()) == {"M#A", "M#B"}
        assert [r["futureId"] for r in journal.records()] == ["M#A", "M#B"]
        assert not os.path.exists(journal.addresses_path + ".tmp")

    def test_corrupt_addresses_file(self, tmp_path):
        """Test a truncated deployed_addresses.json raises JournalError"""
        journal = DeploymentJournal(str(tmp_path))
        with open(journal.addresses_path, 'w') as f:
            f.write('{"SwitchAssetsModule#SwitchAssets": "0x38')

        with pytest.raises(JournalError, match="deployed_addresses.json") as exc_info:
            journal.deployed_addresses()
        assert isinstance(exc_info.value, DeploymentError)
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_addresses_file_must_be_object(self, tmp_path):
        """Test a JSON list in deployed_addresses.json is rejected"""
        journal = DeploymentJournal(str(tmp_path))
        with open(journal.addresses_path, 'w') as f:
            json.dump(["0x" + "11" * 20], f)

        with pytest.raises(JournalError, match="JSON object"):
            journal.address_of("M#A")

    def test_record_refuses_corrupt_journal(self, tmp_path):
        """Test recording over a corrupt address book appends nothing"""
        journal = DeploymentJournal(str(tmp_path))
        with open(journal.addresses_path, 'w') as f:
            f.write("not json")

        with pytest.raises(JournalError):
            journal.record("M#A", "A", DeploymentReceipt(address="0x" + "11" * 20))
        assert not os.path.exists(journal.journal_path)

    def test_corrupt_journal_line(self, tmp_path):
        """Test a broken journal.jsonl line is reported with its line number"""
        journal = DeploymentJournal(str(tmp_path))
        journal.record("M#A", "A", DeploymentReceipt(address="0x" + "11" * 20))
        with open(journal.journal_path, 'a') as f:
            f.write('{"futureId": "M#B"\n')

        with pytest.raises(JournalError, match="line 2"):
            journal.records()
