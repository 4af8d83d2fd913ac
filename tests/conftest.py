"""Shared fixtures for the Up → Actual sync tests."""

from pathlib import Path

import pytest

from up_actual_sync.clients.base import BudgetSession
from up_actual_sync.core.models import AccountSummary, DestinationTransaction, ImportResult
from up_actual_sync.core.settings import Settings

UP_BASE_URL = "https://api.up.test/api/v1"


def make_settings(tmp_path: Path, **overrides: object) -> Settings:
    """Build settings without reading the environment or any .env file."""
    values = {
        "up_api_token": "up:yeah:test-token",
        "up_base_url": UP_BASE_URL,
        "actual_server_url": "http://actual.test:5006",
        "actual_password": "actual-pass",
        "actual_sync_id": "sync-123",
        "actual_account_id": "acct-1",
        "actual_data_dir": tmp_path / "actual-data",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_resource(
    txn_id: str,
    amount: int = -1234,
    created_at: str = "2026-01-26T04:51:32+11:00",
    description: str = "Coffee Shop",
    message: str | None = None,
) -> dict:
    """Build an Up Bank transaction resource as the API returns it."""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 100)
    return {
        "type": "transactions",
        "id": txn_id,
        "attributes": {
            "status": "SETTLED",
            "rawText": None,
            "description": description,
            "message": message,
            "amount": {
                "currencyCode": "AUD",
                "value": f"{sign}{whole}.{frac:02d}",
                "valueInBaseUnits": amount,
            },
            "createdAt": created_at,
            "settledAt": created_at,
            "cardPurchaseMethod": None,
        },
    }


class FakeBudgetSession(BudgetSession):
    """In-memory budget session that records every call and deduplicates on imported_id."""

    def __init__(self, existing: set[str] | None = None, import_error: Exception | None = None) -> None:
        """Start with the given imported ids already present in the budget."""
        self.calls: list[str] = []
        self.existing = set(existing or ())
        self.import_error = import_error
        self.encryption_password: str | None = None
        self.download_args: tuple = ()
        self.imported: list[DestinationTransaction] = []

    def connect(self, server_url: str, password: str, data_dir: Path) -> None:
        """Record the connection."""
        self.calls.append("connect")

    def download_remote_state(self, sync_id: str, *args: str) -> None:
        """Record the download, including whether an encryption password was passed at all."""
        self.calls.append("download_remote_state")
        self.download_args = (sync_id, *args)

    def import_batch(self, account_id: str, records: list[DestinationTransaction]) -> ImportResult:
        """Import records, updating those whose imported_id is already present."""
        self.calls.append("import_batch")
        if self.import_error is not None:
            raise self.import_error
        result = ImportResult()
        for record in records:
            if record.imported_id in self.existing:
                result.updated.append(record.imported_id)
            else:
                self.existing.add(record.imported_id)
                result.added.append(record.imported_id)
            self.imported.append(record)
        return result

    def list_accounts(self) -> list[AccountSummary]:
        """Return a fixed account list."""
        self.calls.append("list_accounts")
        return [AccountSummary(id="acct-1", name="Up Spending"), AccountSummary(id="acct-2", name="Old", closed=True)]

    def disconnect(self) -> None:
        """Record the disconnection."""
        self.calls.append("disconnect")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Complete settings pointing at the fake Up base URL."""
    return make_settings(tmp_path)


@pytest.fixture
def budget_session() -> FakeBudgetSession:
    """Empty fake budget session."""
    return FakeBudgetSession()
