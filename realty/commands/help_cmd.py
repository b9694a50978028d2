"""
Help command for the realty CLI

Prints a cheat sheet of subcommands, report names and menu keys.
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from realty.commands.analytics_cmd import REPORTS

console = Console()

COMMANDS = [
    ("realty", "Open the interactive menu"),
    ("realty init-db [--drop] [--seed]", "Create tables (optionally reset / add sample data)"),
    ("realty report <name> [--page N]", "Print one page of an analytics report"),
    ("realty version", "Show version information"),
    ("realty help", "Show this cheat sheet"),
]

MENU_KEYS = [
    ("1-8", "Open a section from the main menu"),
    ("n / p / q", "Next page, previous page, leave a listing"),
    ("q at a field prompt", "Cancel the form without saving"),
    ("- at an optional field", "Clear the current value"),
    ("b", "Back to the main menu"),
]

EXAMPLES = [
    ("realty init-db --seed", "Create the schema with sample data"),
    ("realty report rent-yield --page 2", "Second page of the rent yield report"),
    ("REALTY_LOG_FILE=realty.log realty", "Log to a file while using the menu"),
]


def _reference_table(title, rows):
    table = Table(title=title, title_style="bold yellow", title_justify="left",
                  show_header=False, box=None, padding=(0, 2))
    table.add_column(style="cyan", no_wrap=True)
    table.add_column()
    for key, text in rows:
        table.add_row(key, text)
    return table


def show_help():
    console.print()
    console.print(Panel("[bold cyan]REALTY MANAGER HELP[/bold cyan]", border_style="cyan",
                        expand=False))
    console.print(_reference_table("COMMANDS", COMMANDS))
    console.print(_reference_table("ANALYTICS REPORTS",
                                   [(key, report.description) for key, report in REPORTS.items()]))
    console.print(_reference_table("MENU NAVIGATION", MENU_KEYS))
    console.print(_reference_table("EXAMPLES", EXAMPLES))
    console.print("\n[dim]Connection settings are read from DB_HOST, DB_PORT, DB_NAME, DB_USER, "
                  "DB_PASSWORD (or a .env file).[/dim]\n")


@click.command('help')
def help_cmd():
    """Show help and available commands"""
    show_help()
