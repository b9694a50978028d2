"""
Helpers shared by the entity command modules
"""
import logging

from rich.console import Console
from rich.prompt import Confirm

from realty.db import execute_query, execute_command
from realty.errors import NotFound

console = Console()
logger = logging.getLogger(__name__)


def show_header(title):
    """Show a formatted header"""
    console.print(f"\n[bold cyan]{'═' * 51}[/bold cyan]")
    console.print(f"[bold cyan]   {title}[/bold cyan]")
    console.print(f"[bold cyan]{'═' * 51}[/bold cyan]\n")


def fetch_one(query, params, what):
    """Return the single row a lookup finds, or raise NotFound"""
    rows = execute_query(query, params)
    if not rows:
        raise NotFound(f"{what} not found")
    return rows[0]


def count_dependents(checks, record_id):
    """
    Run each (label, COUNT query) check for a record.

    Returns only the labels with at least one row, in check order.
    """
    found = {}
    for label, query in checks:
        total = execute_query(query, (record_id,))[0]['total']
        if total:
            found[label] = total
    return found


def apply_update(table, key_column, record_id, values, allowed):
    """
    UPDATE the given columns of one row.

    Only names in `allowed` are accepted, so the SET clause is built from
    known column names and every value goes through a parameter.
    """
    updates = []
    params = []
    for column, value in values.items():
        if column not in allowed:
            raise ValueError(f"Unknown column for {table}: {column}")
        updates.append(f"{column} = %s")
        params.append(value)

    if not updates:
        return 0

    params.append(record_id)
    query = f"""
        UPDATE {table}
        SET {', '.join(updates)}
        WHERE {key_column} = %s
    """
    count = execute_command(query, params)
    if count == 0:
        raise NotFound(f"{table} {record_id} not found")
    logger.info("Updated %s %s: %s", table, record_id, ', '.join(values))
    return count


def confirm_cleanup(entity, record_id, history):
    """Ask before removing historical rows along with a record"""
    if history:
        console.print(f"\n[yellow]Deleting {entity} {record_id} will also remove:[/yellow]")
        for label, count in history.items():
            console.print(f"  • {count} {label}")
    return Confirm.ask(f"Delete {entity} {record_id}?", default=False, console=console)


def print_dependents(error):
    """Explain why a DeleteBlocked delete was refused"""
    console.print(f"[red]{error.entity.capitalize()} {error.record_id} cannot be deleted:[/red]")
    for label, count in error.dependents.items():
        console.print(f"  • {count} {label}")


def wants_filter():
    return Confirm.ask("Filter results?", default=False, console=console)
