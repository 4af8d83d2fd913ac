"""Command-line entrypoint for the Up → Actual sync (``python main.py sync``)."""

from up_actual_sync.cli import cli

if __name__ == "__main__":
    cli()
