"""Tests for the actualpy-backed budget session, with the library entry points replaced by fakes."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

import pytest

from up_actual_sync.clients import actualpy_session
from up_actual_sync.clients.actualpy_session import ActualpyBudgetSession, cents_to_decimal
from up_actual_sync.core.errors import DestinationSessionError
from up_actual_sync.core.models import DestinationTransaction


@dataclass
class FakeTxn:
    """Stand-in for an actualpy Transactions row."""

    financial_id: str | None
    amount: int = 0
    notes: str | None = None
    date: int = 20260126
    cleared: bool = True
    payee_id: str | None = "payee"


@dataclass
class FakeAccount:
    """Stand-in for an actualpy Accounts row."""

    id: str
    name: str
    closed: int = 0
    offbudget: int = 0


@dataclass
class FakeActual:
    """Stand-in for actual.Actual recording how it was used."""

    kwargs: dict
    events: list = field(default_factory=list)
    session: object = "db-session"

    def __enter__(self) -> "FakeActual":
        self.events.append("enter")
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.events.append("exit")

    def commit(self) -> None:
        self.events.append("commit")


@pytest.fixture
def library(monkeypatch: pytest.MonkeyPatch) -> dict:
    """Replace the actualpy entry points used by the session."""
    state = {"instances": [], "reconciled": [], "ledger": [FakeTxn("up-existing", amount=-500)]}

    def fake_actual(**kwargs: object) -> FakeActual:
        instance = FakeActual(kwargs)
        state["instances"].append(instance)
        return instance

    def fake_reconcile(session: object, **kwargs: object) -> FakeTxn:
        if kwargs["payee"] == "explode":
            msg = "payee rejected"
            raise ValueError(msg)
        state["reconciled"].append(kwargs)
        for txn in state["ledger"]:
            if txn.financial_id == kwargs["imported_id"]:
                txn.amount = int(kwargs["amount"] * 100)
                return txn
        txn = FakeTxn(kwargs["imported_id"], amount=int(kwargs["amount"] * 100))
        state["ledger"].append(txn)
        return txn

    monkeypatch.setattr(actualpy_session, "Actual", fake_actual)
    monkeypatch.setattr(
        actualpy_session, "get_account", lambda session, name: FakeAccount(name, "Spending") if name == "acct-1" else None
    )
    monkeypatch.setattr(actualpy_session, "get_transactions", lambda session, account: list(state["ledger"]))
    monkeypatch.setattr(actualpy_session, "reconcile_transaction", fake_reconcile)
    monkeypatch.setattr(
        actualpy_session, "get_accounts", lambda session: [FakeAccount("acct-1", "Spending", offbudget=1)]
    )
    return state


def _txn(imported_id: str, amount: int, payee: str = "Cafe") -> DestinationTransaction:
    return DestinationTransaction(imported_id=imported_id, payee_name=payee, amount=amount, date="2026-01-26")


def _open(tmp_path: Path, encryption_password: str | None = None) -> ActualpyBudgetSession:
    session = ActualpyBudgetSession()
    session.connect("http://actual.test:5006", "pw", tmp_path)
    session.download_remote_state("sync-123", encryption_password)
    return session


def test_cents_to_decimal_is_exact() -> None:
    """Integer cents convert without floating point."""
    if cents_to_decimal(-1) != Decimal("-0.01") or cents_to_decimal(5998) != Decimal("59.98"):
        msg = "Expected exact decimal conversion"
        raise AssertionError(msg)


def test_download_opens_budget(library: dict, tmp_path: Path) -> None:
    """The budget is opened with the sync id and data dir; no encryption password unless given."""
    _open(tmp_path)
    kwargs = library["instances"][0].kwargs
    if kwargs["file"] != "sync-123" or kwargs["data_dir"] != str(tmp_path):
        msg = f"Unexpected Actual kwargs: {kwargs}"
        raise AssertionError(msg)
    if "encryption_password" in kwargs:
        msg = "Expected the encryption password to be omitted"
        raise AssertionError(msg)


def test_download_with_encryption_password(library: dict, tmp_path: Path) -> None:
    """An E2E password is passed through."""
    _open(tmp_path, "e2e")
    if library["instances"][0].kwargs.get("encryption_password") != "e2e":
        msg = "Expected the encryption password to be passed"
        raise AssertionError(msg)


def test_download_before_connect_fails(library: dict) -> None:
    """The session must be connected first."""
    with pytest.raises(DestinationSessionError):
        ActualpyBudgetSession().download_remote_state("sync-123")


def test_import_classifies_added_updated_and_errors(library: dict, tmp_path: Path) -> None:
    """New ids are added, changed existing ids updated, failures collected per record."""
    session = _open(tmp_path)
    result = session.import_batch(
        "acct-1",
        [_txn("up-new", -1234), _txn("up-existing", -750), _txn("up-bad", -1, payee="explode")],
    )
    if result.added != ["up-new"] or result.updated != ["up-existing"]:
        msg = f"Unexpected classification: {result!r}"
        raise AssertionError(msg)
    if len(result.errors) != 1 or result.errors[0].imported_id != "up-bad":
        msg = f"Expected one error for up-bad, got {result.errors!r}"
        raise AssertionError(msg)
    first = library["reconciled"][0]
    if first["amount"] != Decimal("-12.34") or first["imported_id"] != "up-new" or first["cleared"] is not True:
        msg = f"Unexpected reconcile arguments: {first}"
        raise AssertionError(msg)


def test_unchanged_existing_transaction_is_skipped(library: dict, tmp_path: Path) -> None:
    """Re-importing an identical transaction is neither added nor updated."""
    session = _open(tmp_path)
    result = session.import_batch("acct-1", [_txn("up-existing", -500)])
    if result.added or result.updated or result.errors:
        msg = f"Expected a skip, got {result!r}"
        raise AssertionError(msg)


def test_unknown_account_raises(library: dict, tmp_path: Path) -> None:
    """Importing into an account that does not exist fails the whole batch."""
    session = _open(tmp_path)
    with pytest.raises(DestinationSessionError, match="not found"):
        session.import_batch("acct-missing", [_txn("x", -1)])


def test_disconnect_commits_and_closes(library: dict, tmp_path: Path) -> None:
    """Disconnect pushes changes and exits the actualpy context, once."""
    session = _open(tmp_path)
    session.disconnect()
    session.disconnect()
    if library["instances"][0].events != ["enter", "commit", "exit"]:
        msg = f"Unexpected lifecycle: {library['instances'][0].events}"
        raise AssertionError(msg)


def test_list_accounts(library: dict, tmp_path: Path) -> None:
    """Accounts are mapped to summaries."""
    accounts = _open(tmp_path).list_accounts()
    if len(accounts) != 1 or accounts[0].id != "acct-1" or accounts[0].offbudget is not True:
        msg = f"Unexpected accounts: {accounts!r}"
        raise AssertionError(msg)
