"""Main CLI entry point for Realty Manager"""
import logging
import sys

import click
import psycopg2
from rich.console import Console

from realty import db
from realty.errors import ConfigError
from realty.commands import version, help_cmd, init_db, report
from realty.logging_config import configure_logging

console = Console()
logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default=None, help='Override REALTY_LOG_LEVEL')
@click.pass_context
def cli(ctx, log_level):
    """
    Realty Manager

    Owners, properties, tenants, leases, payments and maintenance requests,
    with portfolio analytics.
    """
    configure_logging(level=log_level.upper() if log_level else None)

    if ctx.invoked_subcommand is None:
        # No subcommand provided, launch interactive menu
        from realty.interactive import run_interactive_menu
        try:
            db.connect()
        except (psycopg2.Error, ConfigError) as e:
            logger.error("Could not connect to the database: %s", e)
            console.print(f"[red]Could not connect to the database: {e}[/red]")
            console.print("[dim]Check DB_HOST, DB_PORT, DB_NAME, DB_USER and DB_PASSWORD[/dim]")
            sys.exit(1)
        try:
            run_interactive_menu()
        finally:
            db.close()


# Register commands
cli.add_command(version)
cli.add_command(help_cmd)
cli.add_command(init_db)
cli.add_command(report)

if __name__ == '__main__':
    cli()
