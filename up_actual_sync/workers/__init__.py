"""Workers package: the sync attempt executor and the retry loop around it."""

from .retry import run_with_retry  # noqa: F401
from .sync_runner import SyncRunner, run_once  # noqa: F401
