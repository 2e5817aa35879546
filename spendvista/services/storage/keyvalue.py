"""
Key-Value Storage Implementation

DESIGN DECISION: Records are stored as five independently keyed JSON
values (plus a schema version), the same layout the browser version of
SpendVista kept in localStorage. Keeping the keys independent means a
corrupt value only costs that one value: everything else still loads.

Two backends share the layout:
- InMemoryRecordStorage: a dict of JSON strings, for tests
- JsonFileRecordStorage: one <key>.json file per key in a data directory

TRADEOFFS:
- Each save rewrites every key (fine for personal use)
- Amounts are written as strings so Decimal precision survives a round trip;
  plain JSON numbers written by older versions are still accepted
"""

import json
from abc import abstractmethod
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional, TypeVar

import structlog
from pydantic import ValidationError

from spendvista.config import get_settings
from spendvista.models.audit import AuditEvent
from spendvista.models.records import (
    SCHEMA_VERSION,
    Budget,
    EmergencyFund,
    Preferences,
    RecordSet,
    SavingsGoal,
    Transaction,
)
from spendvista.metrics.engine import to_cents
from spendvista.services.storage.interface import (
    AuditStorageInterface,
    RecordStorageInterface,
    StorageError,
)


TRANSACTIONS_KEY = "spendVistaTransactions"
BUDGET_KEY = "spendVistaBudget"
EMERGENCY_FUND_KEY = "spendVistaEmergencyFund"
SAVINGS_GOALS_KEY = "spendVistaSavingsGoals"
SETTINGS_KEY = "spendVistaSettings"
SCHEMA_VERSION_KEY = "spendVistaSchemaVersion"

ALL_KEYS = [
    TRANSACTIONS_KEY,
    BUDGET_KEY,
    EMERGENCY_FUND_KEY,
    SAVINGS_GOALS_KEY,
    SETTINGS_KEY,
    SCHEMA_VERSION_KEY,
]

T = TypeVar("T")

logger = structlog.get_logger(__name__)


def parse_money(value: Any) -> Decimal:
    """
    Read a stored amount (string or JSON number) as Decimal cents.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not an amount: {value!r}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Not an amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    try:
        return to_cents(amount)
    except InvalidOperation:
        raise ValueError(f"Amount too large: {value!r}")


def _require(data: Any, kind: type, key: str) -> Any:
    if not isinstance(data, kind):
        raise ValueError(f"{key} should be a {kind.__name__}, got {type(data).__name__}")
    return data


class KeyValueRecordStorage(RecordStorageInterface):
    """
    Record storage over any string key-value backend.

    Subclasses only provide raw reads and writes of JSON text.
    """

    def __init__(self):
        self._load_issues: list[tuple[str, str]] = []

    @abstractmethod
    def _read(self, key: str) -> Optional[str]:
        """Raw JSON text stored under key, or None if absent."""
        pass

    @abstractmethod
    def _write(self, key: str, text: str) -> None:
        pass

    @abstractmethod
    def _delete(self, key: str) -> None:
        pass

    @property
    def load_issues(self) -> list[tuple[str, str]]:
        return list(self._load_issues)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> RecordSet:
        self._load_issues = []

        schema_version = self._load_key(SCHEMA_VERSION_KEY, self._parse_version, lambda: SCHEMA_VERSION)
        if schema_version > SCHEMA_VERSION:
            self._report(
                SCHEMA_VERSION_KEY,
                f"stored schema version {schema_version} is newer than {SCHEMA_VERSION}",
            )

        records = RecordSet(
            transactions=self._load_key(TRANSACTIONS_KEY, self._parse_transactions, list),
            budget=self._load_key(BUDGET_KEY, self._parse_budget, Budget),
            emergency_fund=self._load_key(EMERGENCY_FUND_KEY, self._parse_emergency_fund, EmergencyFund),
            savings_goals=self._load_key(SAVINGS_GOALS_KEY, self._parse_goals, list),
            preferences=self._load_key(SETTINGS_KEY, self._parse_preferences, Preferences),
        )

        logger.info(
            "records_loaded",
            transactions=len(records.transactions),
            goals=len(records.savings_goals),
            issues=len(self._load_issues),
        )
        return records

    def _report(self, key: str, reason: str) -> None:
        self._load_issues.append((key, reason))
        logger.warning("stored_value_replaced", key=key, reason=reason)

    def _load_key(self, key: str, parse: Callable[[Any], T], default: Callable[[], T]) -> T:
        raw = self._read(key)
        if raw is None:
            return default()
        try:
            return parse(json.loads(raw))
        except (ValueError, TypeError, KeyError) as e:
            # json.JSONDecodeError and pydantic.ValidationError are ValueErrors
            self._report(key, str(e))
            return default()

    def _parse_version(self, data: Any) -> int:
        if isinstance(data, bool) or not isinstance(data, int) or data < 1:
            raise ValueError(f"Invalid schema version: {data!r}")
        return data

    def _parse_transactions(self, data: Any) -> list[Transaction]:
        transactions = []
        for index, entry in enumerate(_require(data, list, TRANSACTIONS_KEY)):
            try:
                entry = _require(entry, dict, f"{TRANSACTIONS_KEY}[{index}]")
                transactions.append(Transaction(
                    id=str(entry["id"]),
                    type=entry["type"],
                    name=entry.get("name") or "",
                    amount=parse_money(entry["amount"]),
                    date=entry["date"],
                ))
            except (ValueError, TypeError, KeyError, ValidationError) as e:
                self._report(f"{TRANSACTIONS_KEY}[{index}]", f"skipped: {e}")
        return transactions

    def _parse_budget(self, data: Any) -> Budget:
        data = _require(data, dict, BUDGET_KEY)
        return Budget(amount=parse_money(data.get("amount", 0)))

    def _parse_emergency_fund(self, data: Any) -> EmergencyFund:
        data = _require(data, dict, EMERGENCY_FUND_KEY)
        defaults = EmergencyFund()
        return EmergencyFund(
            target=parse_money(data.get("target", defaults.target)),
            saved=parse_money(data.get("saved", defaults.saved)),
            allocation=data.get("allocation", defaults.allocation),
        )

    def _parse_goals(self, data: Any) -> list[SavingsGoal]:
        goals = []
        for index, entry in enumerate(_require(data, list, SAVINGS_GOALS_KEY)):
            try:
                entry = _require(entry, dict, f"{SAVINGS_GOALS_KEY}[{index}]")
                goals.append(SavingsGoal(
                    id=str(entry["id"]),
                    name=entry["name"],
                    target=parse_money(entry["target"]),
                    saved=parse_money(entry.get("saved", 0)),
                ))
            except (ValueError, TypeError, KeyError, ValidationError) as e:
                self._report(f"{SAVINGS_GOALS_KEY}[{index}]", f"skipped: {e}")
        return goals

    def _parse_preferences(self, data: Any) -> Preferences:
        data = _require(data, dict, SETTINGS_KEY)
        dark_mode = data.get("darkMode", False)
        if not isinstance(dark_mode, bool):
            raise ValueError(f"darkMode should be true or false, got {dark_mode!r}")
        return Preferences(dark_mode=dark_mode)

    # -------------------------------------------------------------------------
    # Saving
    # -------------------------------------------------------------------------

    def save(self, records: RecordSet) -> None:
        values = {
            SCHEMA_VERSION_KEY: records.schema_version,
            TRANSACTIONS_KEY: [
                {
                    "id": t.id,
                    "type": t.type.value,
                    "name": t.name,
                    "amount": str(t.amount),
                    "date": t.date.isoformat(),
                }
                for t in records.transactions
            ],
            BUDGET_KEY: {"amount": str(records.budget.amount)},
            EMERGENCY_FUND_KEY: {
                "target": str(records.emergency_fund.target),
                "saved": str(records.emergency_fund.saved),
                "allocation": records.emergency_fund.allocation,
            },
            SAVINGS_GOALS_KEY: [
                {
                    "id": g.id,
                    "name": g.name,
                    "target": str(g.target),
                    "saved": str(g.saved),
                }
                for g in records.savings_goals
            ],
            SETTINGS_KEY: {"darkMode": records.preferences.dark_mode},
        }
        for key, value in values.items():
            self._write(key, json.dumps(value))

    def clear(self) -> None:
        for key in ALL_KEYS:
            self._delete(key)


class InMemoryRecordStorage(KeyValueRecordStorage):
    """Keeps the JSON values in a dict. Nothing survives the process."""

    def __init__(self, values: Optional[dict[str, str]] = None):
        super().__init__()
        self.values: dict[str, str] = dict(values or {})

    def _read(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def _write(self, key: str, text: str) -> None:
        self.values[key] = text

    def _delete(self, key: str) -> None:
        self.values.pop(key, None)


class JsonFileRecordStorage(KeyValueRecordStorage):
    """
    One JSON file per key inside a data directory.

    Files are written to a temporary name and renamed into place, so
    a crash mid-write leaves the previous value intact.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        super().__init__()
        settings = get_settings().storage
        self._data_dir = Path(data_dir) if data_dir is not None else settings.data_dir
        self._indent = settings.indent

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"

    def _read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            # Unreadable counts as malformed: the key falls back to its default
            self._report(key, f"unreadable: {e}")
            return None

    def _write(self, key: str, text: str) -> None:
        if self._indent:
            text = json.dumps(json.loads(text), indent=self._indent)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(text, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}")

    def _delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {self._path(key)}: {e}")


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
