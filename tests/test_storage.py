"""
Tests for key-value record storage.
"""

import json
import pytest
from datetime import date
from decimal import Decimal

from spendvista.models.records import (
    Budget,
    EmergencyFund,
    Preferences,
    RecordSet,
    SavingsGoal,
    Transaction,
)
from spendvista.services.storage import (
    ALL_KEYS,
    InMemoryAuditStorage,
    InMemoryRecordStorage,
    JsonFileRecordStorage,
    StorageError,
    parse_money,
)
from spendvista.services.storage.keyvalue import (
    BUDGET_KEY,
    EMERGENCY_FUND_KEY,
    SAVINGS_GOALS_KEY,
    SCHEMA_VERSION_KEY,
    SETTINGS_KEY,
    TRANSACTIONS_KEY,
)
from spendvista.models.audit import AuditEventBuilder


def sample_records() -> RecordSet:
    return RecordSet(
        transactions=[
            Transaction(id="1", type="income", name="Salary", amount=Decimal("1000.00"), date=date(2024, 6, 1)),
            Transaction(id="2", type="expense", name="Groceries Spar", amount=Decimal("200.50"), date=date(2024, 6, 3)),
        ],
        budget=Budget(amount=Decimal("1500")),
        emergency_fund=EmergencyFund(target=Decimal("5000"), saved=Decimal("100.00"), allocation=15),
        savings_goals=[SavingsGoal(id="3", name="Holiday", target=Decimal("2000"), saved=Decimal("500"))],
        preferences=Preferences(dark_mode=True),
    )


class TestInMemoryRecordStorage:
    """Tests for loading and saving through the key-value layout."""

    def test_empty_storage_loads_defaults(self):
        """Test that missing keys give default records without issues."""
        storage = InMemoryRecordStorage()
        records = storage.load()
        assert records.transactions == []
        assert records.budget.amount == 0
        assert records.emergency_fund.allocation == 10
        assert records.preferences.dark_mode is False
        assert storage.load_issues == []

    def test_save_then_load_keeps_records(self):
        """Test that a saved record set loads back unchanged."""
        storage = InMemoryRecordStorage()
        original = sample_records()
        storage.save(original)

        loaded = InMemoryRecordStorage(storage.values).load()
        assert loaded == original

    def test_saved_layout(self):
        """Test the stored keys and field names."""
        storage = InMemoryRecordStorage()
        storage.save(sample_records())

        assert set(storage.values) == set(ALL_KEYS)
        assert json.loads(storage.values[SCHEMA_VERSION_KEY]) == 1
        assert json.loads(storage.values[SETTINGS_KEY]) == {"darkMode": True}
        transactions = json.loads(storage.values[TRANSACTIONS_KEY])
        assert transactions[1] == {
            "id": "2",
            "type": "expense",
            "name": "Groceries Spar",
            "amount": "200.50",
            "date": "2024-06-03",
        }
        fund = json.loads(storage.values[EMERGENCY_FUND_KEY])
        assert fund == {"target": "5000", "saved": "100.00", "allocation": 15}

    def test_malformed_key_falls_back_alone(self):
        """Test that one corrupt key does not affect the others."""
        storage = InMemoryRecordStorage()
        storage.save(sample_records())
        storage.values[BUDGET_KEY] = "{not json"

        records = storage.load()
        assert records.budget.amount == 0
        assert len(records.transactions) == 2
        assert records.emergency_fund.allocation == 15
        assert [key for key, _ in storage.load_issues] == [BUDGET_KEY]

    def test_wrong_shape_falls_back(self):
        """Test that valid JSON of the wrong type is treated as malformed."""
        storage = InMemoryRecordStorage({
            TRANSACTIONS_KEY: json.dumps({"id": "1"}),
            SETTINGS_KEY: json.dumps({"darkMode": "yes"}),
        })
        records = storage.load()
        assert records.transactions == []
        assert records.preferences.dark_mode is False
        assert len(storage.load_issues) == 2

    def test_bad_entries_are_skipped(self):
        """Test that unusable list entries are dropped and reported."""
        storage = InMemoryRecordStorage({
            TRANSACTIONS_KEY: json.dumps([
                {"id": "1", "type": "income", "name": "Salary", "amount": "10.00", "date": "2024-06-01"},
                {"id": "2", "type": "refund", "name": "Odd", "amount": "5", "date": "2024-06-01"},
                {"id": "3", "type": "expense", "name": "No date", "amount": "5"},
                "garbage",
            ]),
            SAVINGS_GOALS_KEY: json.dumps([
                {"id": "4", "name": "Car", "target": "0"},
                {"id": "5", "name": "Bike", "target": "300"},
            ]),
        })
        records = storage.load()
        assert [t.id for t in records.transactions] == ["1"]
        assert [g.id for g in records.savings_goals] == ["5"]
        assert len(storage.load_issues) == 4

    def test_legacy_number_amounts_are_accepted(self):
        """Test that amounts stored as JSON numbers load as Decimal cents."""
        storage = InMemoryRecordStorage({
            TRANSACTIONS_KEY: json.dumps([
                {"id": 1718000000000, "type": "expense", "name": "Coffee", "amount": 0.1, "date": "2024-06-01"},
            ]),
            BUDGET_KEY: json.dumps({"amount": 1000}),
            EMERGENCY_FUND_KEY: json.dumps({"target": 5000, "saved": 250.5, "allocation": 10}),
        })
        records = storage.load()
        assert records.transactions[0].amount == Decimal("0.10")
        assert records.transactions[0].id == "1718000000000"
        assert records.budget.amount == Decimal("1000.00")
        assert records.emergency_fund.saved == Decimal("250.50")
        assert storage.load_issues == []

    def test_huge_budget_amount_falls_back(self):
        """Test that an amount too large to hold in cents is treated as malformed."""
        storage = InMemoryRecordStorage({BUDGET_KEY: '{"amount": 1e30}'})
        records = storage.load()
        assert records.budget.amount == 0
        assert [key for key, _ in storage.load_issues] == [BUDGET_KEY]

    def test_huge_transaction_amount_is_skipped(self):
        storage = InMemoryRecordStorage({
            TRANSACTIONS_KEY: json.dumps([
                {"id": "1", "type": "expense", "name": "Huge", "amount": 1e30, "date": "2024-06-01"},
                {"id": "2", "type": "expense", "name": "Coffee", "amount": "3.50", "date": "2024-06-01"},
            ]),
        })
        records = storage.load()
        assert [t.id for t in records.transactions] == ["2"]
        assert storage.load_issues[0][0] == f"{TRANSACTIONS_KEY}[0]"

    def test_partial_emergency_fund_uses_defaults(self):
        storage = InMemoryRecordStorage({EMERGENCY_FUND_KEY: json.dumps({"target": "900"})})
        fund = storage.load().emergency_fund
        assert fund.target == Decimal("900.00")
        assert fund.saved == 0
        assert fund.allocation == 10

    def test_newer_schema_version_is_reported(self):
        storage = InMemoryRecordStorage({SCHEMA_VERSION_KEY: "7"})
        storage.load()
        assert storage.load_issues[0][0] == SCHEMA_VERSION_KEY

    def test_clear_removes_every_key(self):
        storage = InMemoryRecordStorage()
        storage.save(sample_records())
        storage.clear()
        assert storage.values == {}


class TestJsonFileRecordStorage:
    """Tests for the file-per-key backend."""

    def test_round_trip_through_files(self, tmp_path):
        """Test that records survive a new storage instance."""
        JsonFileRecordStorage(tmp_path).save(sample_records())

        for key in ALL_KEYS:
            assert (tmp_path / f"{key}.json").exists()
        assert JsonFileRecordStorage(tmp_path).load() == sample_records()

    def test_creates_missing_directory(self, tmp_path):
        data_dir = tmp_path / "nested" / "data"
        JsonFileRecordStorage(data_dir).save(RecordSet())
        assert (data_dir / f"{BUDGET_KEY}.json").exists()

    def test_corrupt_file_falls_back(self, tmp_path):
        storage = JsonFileRecordStorage(tmp_path)
        storage.save(sample_records())
        (tmp_path / f"{SAVINGS_GOALS_KEY}.json").write_text("[{", encoding="utf-8")

        records = JsonFileRecordStorage(tmp_path).load()
        assert records.savings_goals == []
        assert len(records.transactions) == 2

    def test_file_that_is_not_utf8_falls_back(self, tmp_path):
        """Test that undecodable bytes in one file only cost that key."""
        storage = JsonFileRecordStorage(tmp_path)
        storage.save(sample_records())
        (tmp_path / f"{BUDGET_KEY}.json").write_bytes(b'{"amount": "\xff\xfe"}')

        reloaded = JsonFileRecordStorage(tmp_path)
        records = reloaded.load()
        assert records.budget.amount == 0
        assert len(records.transactions) == 2
        assert [key for key, _ in reloaded.load_issues] == [BUDGET_KEY]

    def test_write_failure_raises_storage_error(self, tmp_path):
        """Test that an unwritable data directory raises StorageError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")

        storage = JsonFileRecordStorage(blocker / "data")
        with pytest.raises(StorageError):
            storage.save(RecordSet())

    def test_clear_deletes_files(self, tmp_path):
        storage = JsonFileRecordStorage(tmp_path)
        storage.save(sample_records())
        storage.clear()
        assert list(tmp_path.iterdir()) == []


class TestParseMoney:
    """Tests for reading stored amounts."""

    def test_strings_and_numbers(self):
        assert parse_money("12.5") == Decimal("12.50")
        assert parse_money(3) == Decimal("3.00")
        assert parse_money(0.1) == Decimal("0.10")

    def test_rejects_non_amounts(self):
        for value in (None, True, "abc", "NaN", "Infinity", [1], 1e30):
            with pytest.raises(ValueError):
                parse_money(value)


class TestInMemoryAuditStorage:
    """Tests for the append-only audit log."""

    def test_events_by_entity_and_recent(self):
        storage = InMemoryAuditStorage()
        first = AuditEventBuilder.goal_created("7", "Car", Decimal("100"))
        second = AuditEventBuilder.goal_deleted("7", "Car")
        other = AuditEventBuilder.goal_created("8", "Bike", Decimal("50"))
        for event in (first, second, other):
            assert storage.append_event(event) is True

        assert storage.get_events_by_entity("goal", "7") == [first, second]
        assert storage.get_recent_events(limit=2) == [other, second]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
