"""Up → Actual sync CLI application using Typer.

This is the process boundary: configuration is loaded and validated here, once, and every failure is turned into
an exit code here. Nothing below this module exits the process.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from up_actual_sync.clients.actual_budget import ActualBudgetClient
from up_actual_sync.clients.upbank import UpBankClient
from up_actual_sync.core.errors import ConfigValidationError, RetryExhaustedError, SyncError
from up_actual_sync.core.settings import Settings, load_config
from up_actual_sync.core.utils import ensure_dir, get_logger, setup_logging
from up_actual_sync.services.notifier import Notifier
from up_actual_sync.workers.retry import run_with_retry
from up_actual_sync.workers.sync_runner import default_budget_session, run_once

app = typer.Typer(
    name="up-actual-sync",
    help="Sync settled Up Bank transactions into Actual Budget",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)
logger = get_logger("up-actual-sync.cli")

ENV_FILE_OPTION = typer.Option(Path(".env"), "--env-file", help="dotenv file to read settings from")


def _load_settings(env_file: Path | None) -> Settings:
    """Validate configuration before anything touches the network; exit 1 listing every problem."""
    try:
        settings = load_config(env_file)
    except ConfigValidationError as exc:
        err_console.print("ERROR:", str(exc), style="bold red", markup=False)
        err_console.print("Copy .env.example to .env and fill in your values.", style="dim")
        raise typer.Exit(code=1) from exc
    setup_logging(settings.log_level)
    return settings


@app.command("sync")
def sync(
    once: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--once",
        help="Run a single attempt and leave retries to the external scheduler",
    ),
    env_file: Path = ENV_FILE_OPTION,
) -> None:
    """Fetch settled Up Bank transactions for the rolling window and import them into Actual Budget.

    Retries failed attempts after 5, 15 and 45 minutes (MAX_RETRIES attempts in total) unless --once is given.
    """
    settings = _load_settings(env_file)
    max_attempts = 1 if once else settings.max_retries
    logger.info(f"Sync window {settings.sync_window_hours}h, max attempts {max_attempts}")
    try:
        run_with_retry(lambda: run_once(settings), max_attempts, Notifier(settings.webhook_url))
    except RetryExhaustedError as exc:
        raise typer.Exit(code=1) from exc


@app.command("check-source")
def check_source(env_file: Path = ENV_FILE_OPTION) -> None:
    """Verify the Up Bank API token without fetching anything."""
    settings = _load_settings(env_file)
    try:
        with UpBankClient(settings) as source:
            source.check_connectivity()
    except SyncError as exc:
        err_console.print(str(exc), style="bold red", markup=False)
        raise typer.Exit(code=1) from exc
    console.print("[bold green]Up Bank API token is valid[/bold green]")


@app.command("list-accounts")
def list_accounts(env_file: Path = ENV_FILE_OPTION) -> None:
    """List the accounts in the Actual Budget file, to find the value for ACTUAL_ACCOUNT_ID."""
    settings = _load_settings(env_file)
    ensure_dir(settings.actual_data_dir)
    destination = ActualBudgetClient(settings, default_budget_session())
    try:
        with destination.session():
            accounts = destination.list_accounts()
    except SyncError as exc:
        err_console.print(str(exc), style="bold red", markup=False)
        raise typer.Exit(code=1) from exc

    table = Table(title="Actual Budget accounts")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Status")
    for account in accounts:
        status = "closed" if account.closed else ("off budget" if account.offbudget else "on budget")
        table.add_row(account.id, account.name or "", status)
    console.print(table)


@app.command("serve")
def serve(env_file: Path = ENV_FILE_OPTION) -> None:
    """Run the HTTP trigger (POST /sync) with Uvicorn."""
    import uvicorn

    from up_actual_sync.main import create_app

    settings = _load_settings(env_file)
    uvicorn.run(create_app(settings), host=settings.server_host, port=settings.server_port)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
