"""
Owner management

Owners hold shares of properties through the property_owner table; an owner
with any stake cannot be deleted until the stakes are reassigned.
"""
import logging

from rich.console import Console

from realty.db import execute_query, execute_insert, execute_command
from realty.errors import DeleteBlocked
from realty.paging import browse, query_paginator
from realty.utils import (ask, ask_id, parse_email, parse_phone, fmt_money, fmt_pct,
                          fmt_name, FormCancelled)
from realty.commands.common import (show_header, fetch_one, count_dependents, apply_update,
                                    confirm_cleanup, print_dependents, wants_filter)

console = Console()
logger = logging.getLogger(__name__)

OWNER_COLUMNS = ('first_name', 'last_name', 'email', 'phone')

BLOCKING_CHECKS = [
    ("ownership stake(s)", "SELECT COUNT(*) AS total FROM property_owner WHERE owner_id = %s"),
]

# ============================================================================
# DATA ACCESS
# ============================================================================

def insert_owner(first_name, last_name, email=None, phone=None):
    owner_id = execute_insert("""
        INSERT INTO owner (first_name, last_name, email, phone)
        VALUES (%s, %s, %s, %s)
        RETURNING owner_id
    """, (first_name, last_name, email, phone))
    logger.info("Created owner %s (%s %s)", owner_id, first_name, last_name)
    return owner_id


def fetch_owner(owner_id):
    return fetch_one("SELECT * FROM owner WHERE owner_id = %s", (owner_id,), f"Owner {owner_id}")


def update_owner(owner_id, **values):
    return apply_update('owner', 'owner_id', owner_id, values, OWNER_COLUMNS)


def owner_list_query(name=None):
    query = """
        SELECT o.owner_id, o.first_name, o.last_name, o.email, o.phone,
               COUNT(po.property_id) AS property_count
        FROM owner o
        LEFT JOIN property_owner po ON po.owner_id = o.owner_id
    """
    params = []
    if name:
        query += " WHERE (o.first_name || ' ' || o.last_name) ILIKE %s"
        params.append(f"%{name}%")
    query += """
        GROUP BY o.owner_id, o.first_name, o.last_name, o.email, o.phone
        ORDER BY o.last_name, o.first_name, o.owner_id
    """
    return query, params


def owner_holdings(owner_id):
    return execute_query("""
        SELECT p.property_id, p.address, p.city, p.purchase_price, po.ownership_percentage
        FROM property_owner po
        JOIN property p ON p.property_id = po.property_id
        WHERE po.owner_id = %s
        ORDER BY p.property_id
    """, (owner_id,))


def delete_owner(owner_id):
    """Delete an owner with no ownership stakes"""
    fetch_owner(owner_id)
    blocking = count_dependents(BLOCKING_CHECKS, owner_id)
    if blocking:
        raise DeleteBlocked('owner', owner_id, blocking)
    count = execute_command("DELETE FROM owner WHERE owner_id = %s", (owner_id,))
    logger.info("Deleted owner %s", owner_id)
    return count

# ============================================================================
# INTERACTIVE HANDLERS
# ============================================================================

def _ask_owner_fields(current=None):
    current = current or {}
    return {
        'first_name': ask("First Name", default=current.get('first_name')),
        'last_name': ask("Last Name", default=current.get('last_name')),
        'email': ask("Email", parse_email, default=current.get('email'), required=False),
        'phone': ask("Phone", parse_phone, default=current.get('phone'), required=False),
    }


def create_owner():
    """Add a new owner"""
    show_header("New Owner")
    console.print("[dim]Type q at any prompt to cancel[/dim]\n")
    try:
        fields = _ask_owner_fields()
    except FormCancelled:
        console.print("[yellow]Cancelled[/yellow]")
        return
    owner_id = insert_owner(**fields)
    console.print(f"[green]✓ Owner {owner_id} created[/green]")


def list_owners():
    """List owners, optionally filtered by name"""
    name = ask("Filter by name (blank for all)", required=False) if wants_filter() else None
    query, params = owner_list_query(name)
    browse(
        query_paginator(query, params),
        "Owners",
        [("ID", {"style": "cyan"}), ("Name", {"style": "green"}), ("Email", {}),
         ("Phone", {"style": "yellow"}), ("Properties", {"justify": "right"})],
        lambda o: (str(o['owner_id']), fmt_name(o), o['email'] or '', o['phone'] or '',
                   str(o['property_count'])),
    )


def show_owner():
    """Show one owner with their holdings"""
    owner_id = ask_id("Owner ID")
    if owner_id is None:
        return
    o = fetch_owner(owner_id)
    console.print(f"\n[bold cyan]Owner #{o['owner_id']}: {fmt_name(o)}[/bold cyan]")
    console.print(f"Email: {o['email'] or 'Not set'}")
    console.print(f"Phone: {o['phone'] or 'Not set'}")

    holdings = owner_holdings(owner_id)
    if not holdings:
        console.print("\n[yellow]No ownership stakes[/yellow]")
        return
    console.print(f"\n[bold]Holdings ({len(holdings)}):[/bold]")
    for h in holdings:
        console.print(f"  • #{h['property_id']} {h['address']}, {h['city']}  "
                      f"{fmt_pct(h['ownership_percentage'])} of {fmt_money(h['purchase_price'])}")


def edit_owner():
    """Update an owner's contact details"""
    owner_id = ask_id("Owner ID")
    if owner_id is None:
        return
    current = fetch_owner(owner_id)
    console.print("[dim]Press Enter to keep current value, - to clear an optional field, q to cancel[/dim]\n")
    try:
        fields = _ask_owner_fields(current)
    except FormCancelled:
        console.print("[yellow]Update cancelled[/yellow]")
        return
    update_owner(owner_id, **fields)
    console.print(f"[green]✓ Owner {owner_id} updated[/green]")


def remove_owner():
    """Delete an owner after the dependency check"""
    owner_id = ask_id("Owner ID to delete")
    if owner_id is None:
        return
    fetch_owner(owner_id)
    blocking = count_dependents(BLOCKING_CHECKS, owner_id)
    if blocking:
        print_dependents(DeleteBlocked('owner', owner_id, blocking))
        return
    if not confirm_cleanup('owner', owner_id, {}):
        console.print("[yellow]Cancelled[/yellow]")
        return
    delete_owner(owner_id)
    console.print(f"[green]✓ Owner {owner_id} deleted[/green]")
