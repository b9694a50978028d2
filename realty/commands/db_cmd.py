"""
Database setup commands
"""
import logging
import sys

import click
import psycopg2
from rich.console import Console

from realty import db
from realty.errors import ConfigError

console = Console()
logger = logging.getLogger(__name__)


def initialize_database(drop=False, seed=False):
    """Run the bundled scripts: drop.sql (optional), schema.sql, seed.sql (optional)"""
    if drop:
        db.run_script('drop.sql')
    db.run_script('schema.sql')
    if seed:
        db.run_script('seed.sql')


@click.command('init-db')
@click.option('--drop', is_flag=True, help='Drop existing tables first (destroys data)')
@click.option('--seed', is_flag=True, help='Load sample data after creating tables')
def init_db(drop, seed):
    """Create the Realty Manager tables"""
    if drop and not click.confirm('Drop all Realty Manager tables and their data?', default=False):
        console.print("[yellow]Cancelled[/yellow]")
        return
    try:
        initialize_database(drop, seed)
    except (psycopg2.Error, ConfigError) as e:
        logger.exception("Schema setup failed")
        console.print(f"[red]Database error: {e}[/red]")
        sys.exit(1)
    finally:
        db.close()
    console.print("[green]✓ Schema created[/green]")
    if seed:
        console.print("[green]✓ Sample data loaded[/green]")
