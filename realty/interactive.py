"""Interactive menu system for Realty Manager"""
import logging

import psycopg2
from rich.console import Console
from rich.prompt import Prompt, Confirm

from realty.errors import DeleteBlocked, RealtyError
from realty.utils import FormCancelled
from realty.commands import (owner_cmd, property_cmd, ownership_cmd, tenant_cmd, lease_cmd,
                             payment_cmd, maintenance_cmd, analytics_cmd)
from realty.commands.common import show_header, print_dependents
from realty.commands.help_cmd import show_help
from realty.commands.version_cmd import show_version

console = Console()
logger = logging.getLogger(__name__)

QUIT = 'quit'
BACK = 'back'


def clear_screen():
    """Clear the terminal screen using Rich"""
    console.clear()


def pause():
    """Pause and wait for user to press Enter"""
    console.print("\n[dim]Press Enter to continue...[/dim]", end="")
    input()


def run_handler(handler):
    """
    Run one menu action.

    Database errors, business-rule errors and anything unexpected are
    reported here so control always returns to the menu.
    """
    name = getattr(handler, '__name__', repr(handler))
    try:
        handler()
        return True
    except FormCancelled:
        console.print("[yellow]Cancelled[/yellow]")
    except DeleteBlocked as e:
        logger.info("%s", e)
        print_dependents(e)
    except RealtyError as e:
        logger.info("%s: %s", name, e)
        console.print(f"[red]{e}[/red]")
    except psycopg2.Error as e:
        logger.exception("Database error in %s", name)
        console.print(f"[red]Database error: {str(e).strip()}[/red]")
    except Exception as e:
        logger.exception("Unexpected error in %s", name)
        console.print(f"[red]Error: {e}[/red]")
    return False


# Each submenu maps an option key to (label, handler)
OWNER_MENU = {
    '1': ("List Owners", owner_cmd.list_owners),
    '2': ("Show Owner", owner_cmd.show_owner),
    '3': ("Add Owner", owner_cmd.create_owner),
    '4': ("Edit Owner", owner_cmd.edit_owner),
    '5': ("Delete Owner", owner_cmd.remove_owner),
}

PROPERTY_MENU = {
    '1': ("List Properties", property_cmd.list_properties),
    '2': ("Show Property", property_cmd.show_property),
    '3': ("Add Property", property_cmd.create_property),
    '4': ("Edit Property", property_cmd.edit_property),
    '5': ("Delete Property", property_cmd.remove_property),
}

OWNERSHIP_MENU = {
    '1': ("List Ownership Shares", ownership_cmd.list_ownership),
    '2': ("Assign Owner to Property", ownership_cmd.assign_owner),
    '3': ("Change Ownership Share", ownership_cmd.change_share),
    '4': ("Remove Owner from Property", ownership_cmd.remove_owner_link),
}

TENANT_MENU = {
    '1': ("List Tenants", tenant_cmd.list_tenants),
    '2': ("Show Tenant", tenant_cmd.show_tenant),
    '3': ("Add Tenant", tenant_cmd.create_tenant),
    '4': ("Edit Tenant", tenant_cmd.edit_tenant),
    '5': ("Delete Tenant", tenant_cmd.remove_tenant),
}

LEASE_MENU = {
    '1': ("List Leases", lease_cmd.list_leases),
    '2': ("Show Lease", lease_cmd.show_lease),
    '3': ("Create Lease", lease_cmd.create_lease),
    '4': ("Edit Lease Terms", lease_cmd.edit_lease),
    '5': ("Change Lease Status", lease_cmd.change_lease_status),
    '6': ("Delete Lease", lease_cmd.remove_lease),
}

PAYMENT_MENU = {
    '1': ("List Payments", payment_cmd.list_payments),
    '2': ("Record Payment", payment_cmd.record_payment),
    '3': ("Edit Payment", payment_cmd.edit_payment),
    '4': ("Delete Payment", payment_cmd.remove_payment),
}

MAINTENANCE_MENU = {
    '1': ("List Requests", maintenance_cmd.list_requests),
    '2': ("Open Request", maintenance_cmd.open_request),
    '3': ("Edit Request", maintenance_cmd.edit_request),
    '4': ("Change Request Status", maintenance_cmd.change_request_status),
    '5': ("Delete Request", maintenance_cmd.remove_request),
}

ANALYTICS_MENU = {
    str(number): (report.title, analytics_cmd.report_handler(key))
    for number, (key, report) in enumerate(analytics_cmd.REPORTS.items(), start=1)
}

MAIN_MENU = {
    '1': ("Owners", OWNER_MENU),
    '2': ("Properties", PROPERTY_MENU),
    '3': ("Ownership", OWNERSHIP_MENU),
    '4': ("Tenants", TENANT_MENU),
    '5': ("Leases", LEASE_MENU),
    '6': ("Payments", PAYMENT_MENU),
    '7': ("Maintenance Requests", MAINTENANCE_MENU),
    '8': ("Analytics", ANALYTICS_MENU),
}


def show_menu(title, options, footer):
    """Display a numbered menu"""
    clear_screen()
    show_header(title)
    for key, (label, _) in options.items():
        console.print(f"   {key}) {label}")
    console.print()
    for key, label in footer:
        console.print(f"   {key}) {label}")
    console.print(f"\n[dim]{'─' * 51}[/dim]")


def handle_submenu(title, options):
    """Handle one submenu until the user goes back or quits"""
    while True:
        show_menu(title, options, [('b', "Back to Main Menu"), ('q', "Quit")])
        choice = Prompt.ask("Select option", console=console).strip().lower()

        if choice == 'q':
            return QUIT
        elif choice == 'b':
            return BACK
        elif choice in options:
            label, handler = options[choice]
            logger.debug("Menu action: %s / %s", title, label)
            run_handler(handler)
            pause()
        else:
            console.print("[yellow]Invalid option, please try again[/yellow]")
            pause()


def confirm_quit():
    return Confirm.ask("\n[yellow]Are you sure you want to quit?[/yellow]", default=False,
                       console=console)


def run_interactive_menu():
    """Main interactive menu loop; returns when the user quits"""
    try:
        while True:
            show_menu("Realty Manager", MAIN_MENU, [('v', "Version Info"), ('h', "Help"), ('q', "Quit")])
            choice = Prompt.ask("Select option", console=console).strip().lower()

            if choice == 'q':
                if confirm_quit():
                    break
            elif choice == 'v':
                run_handler(show_version)
                pause()
            elif choice == 'h':
                run_handler(show_help)
                pause()
            elif choice in MAIN_MENU:
                title, options = MAIN_MENU[choice]
                if handle_submenu(title, options) == QUIT and confirm_quit():
                    break
            else:
                console.print("[yellow]Invalid option, please try again[/yellow]")
                pause()
    except (KeyboardInterrupt, EOFError):
        pass

    clear_screen()
    console.print("\n[cyan]Thank you for using Realty Manager![/cyan]\n")
