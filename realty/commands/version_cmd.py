"""Version command"""
import click
from rich.console import Console
from realty import __version__
from realty.config import get_db_params
from realty.errors import ConfigError

console = Console()


def show_version():
    console.print(f"\n[bold cyan]Realty Manager[/bold cyan] [green]v{__version__}[/green]")
    try:
        params = get_db_params()
    except ConfigError as e:
        console.print(f"[dim]Database:[/dim] [red]{e}[/red]")
    else:
        console.print(f"[dim]Database:[/dim] {params['database'] or 'not configured'} "
                      f"@ {params['host']}:{params['port']}")
    console.print("[dim]Tables:[/dim] owner, property, property_owner, tenant, lease, payment, "
                  "maintenance_request\n")


@click.command()
def version():
    """Show Realty Manager version information"""
    show_version()
