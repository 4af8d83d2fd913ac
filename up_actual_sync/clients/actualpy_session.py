"""BudgetSession backed by the actualpy library.

actualpy logs in and downloads the budget file when an ``Actual`` instance is entered as a context manager, and
works on a local SQLite copy under ``data_dir``. ``commit()`` pushes the local changes back to the server.
"""

from contextlib import ExitStack
from datetime import date
from decimal import Decimal
from pathlib import Path

from actual import Actual
from actual.queries import get_account, get_accounts, get_transactions, reconcile_transaction

from up_actual_sync.clients.base import BudgetSession
from up_actual_sync.core.errors import DestinationSessionError
from up_actual_sync.core.models import AccountSummary, DestinationTransaction, ImportRecordError, ImportResult
from up_actual_sync.core.utils import get_logger

logger = get_logger("up-actual-sync.actual")


def cents_to_decimal(cents: int) -> Decimal:
    """Exact decimal for integer cents; actualpy's query helpers take amounts in currency units."""
    return Decimal(cents).scaleb(-2)


def _snapshot(txn: object) -> tuple:
    """Fields an import may change on an existing transaction."""
    return tuple(getattr(txn, name, None) for name in ("date", "amount", "notes", "cleared", "payee_id"))


class ActualpyBudgetSession(BudgetSession):
    """Budget session that talks to an Actual server through actualpy."""

    def __init__(self, cert: bool | str = False) -> None:
        """Initialize an unconnected session; ``cert`` is passed through for self-signed servers."""
        self.cert = cert
        self._server_url: str | None = None
        self._password: str | None = None
        self._data_dir: Path | None = None
        self._stack: ExitStack | None = None
        self._actual: Actual | None = None

    def connect(self, server_url: str, password: str, data_dir: Path) -> None:
        """Remember the server credentials; actualpy authenticates when the budget is opened."""
        self._server_url = server_url
        self._password = password
        self._data_dir = data_dir

    def download_remote_state(self, sync_id: str, encryption_password: str | None = None) -> None:
        """Log in and download the budget into the local working copy."""
        if self._server_url is None:
            msg = "download_remote_state() called before connect()"
            raise DestinationSessionError(msg)
        kwargs = {"encryption_password": encryption_password} if encryption_password else {}
        stack = ExitStack()
        try:
            self._actual = stack.enter_context(
                Actual(
                    base_url=self._server_url,
                    password=self._password,
                    file=sync_id,
                    data_dir=str(self._data_dir),
                    cert=self.cert,
                    **kwargs,
                )
            )
        except BaseException:
            stack.close()
            raise
        self._stack = stack

    def _open(self) -> Actual:
        if self._actual is None:
            msg = "No budget downloaded; call download_remote_state() first"
            raise DestinationSessionError(msg)
        return self._actual

    def import_batch(self, account_id: str, records: list[DestinationTransaction]) -> ImportResult:
        """Reconcile each record by ``imported_id``; failures are collected per record, not raised."""
        session = self._open().session
        account = get_account(session, account_id)
        if account is None:
            msg = f"Account {account_id} not found in budget"
            raise DestinationSessionError(msg)

        existing = {
            txn.financial_id: _snapshot(txn)
            for txn in get_transactions(session, account=account)
            if getattr(txn, "financial_id", None)
        }
        result = ImportResult()
        already_matched = []
        for record in records:
            try:
                txn = reconcile_transaction(
                    session,
                    date=date.fromisoformat(record.date),
                    account=account,
                    payee=record.payee_name,
                    notes=record.notes or "",
                    amount=cents_to_decimal(record.amount),
                    imported_id=record.imported_id,
                    cleared=record.cleared,
                    already_matched=already_matched,
                )
            except Exception as exc:  # noqa: BLE001
                logger.warning(f"Failed to import {record.imported_id}: {exc}")
                result.errors.append(ImportRecordError(imported_id=record.imported_id, message=str(exc)))
                continue
            already_matched.append(txn)
            if record.imported_id not in existing:
                result.added.append(record.imported_id)
            elif _snapshot(txn) != existing[record.imported_id]:
                result.updated.append(record.imported_id)
            # else: already present and unchanged, counted as skipped
        return result

    def list_accounts(self) -> list[AccountSummary]:
        """List every account in the downloaded budget."""
        return [
            AccountSummary(
                id=str(account.id),
                name=account.name,
                closed=bool(account.closed),
                offbudget=bool(account.offbudget),
            )
            for account in get_accounts(self._open().session)
        ]

    def disconnect(self) -> None:
        """Commit local changes to the server, then close the session whatever happens."""
        stack, actual = self._stack, self._actual
        self._stack = None
        self._actual = None
        if stack is None:
            return
        try:
            actual.commit()
        finally:
            stack.close()
