"""Budget session abstraction for the destination side of the sync.

This module defines the session contract the destination client drives: log in, download the budget into a local
working copy, import a batch keyed by ``imported_id``, and close (pushing local changes back to the server).
"""

from abc import ABC, abstractmethod
from pathlib import Path

from up_actual_sync.core.models import AccountSummary, DestinationTransaction, ImportResult


class BudgetSession(ABC):
    """Abstract base class for budget sessions."""

    @abstractmethod
    def connect(self, server_url: str, password: str, data_dir: Path) -> None:
        """Open a session against the budget server, using ``data_dir`` as the local working copy."""

    @abstractmethod
    def download_remote_state(self, sync_id: str, encryption_password: str | None = None) -> None:
        """Download the budget identified by ``sync_id`` into the working copy."""

    @abstractmethod
    def import_batch(self, account_id: str, records: list[DestinationTransaction]) -> ImportResult:
        """Import records, treating an already-present ``imported_id`` as update-or-skip."""

    @abstractmethod
    def list_accounts(self) -> list[AccountSummary]:
        """List every account in the downloaded budget."""

    @abstractmethod
    def disconnect(self) -> None:
        """Flush local changes to the server and release the session."""
