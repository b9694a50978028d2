"""
Tenant management
"""
import logging

from rich.console import Console

from realty.db import execute_query, execute_insert, transaction
from realty.errors import DeleteBlocked
from realty.paging import browse, query_paginator
from realty.utils import (ask, ask_id, parse_email, parse_phone, fmt_date, fmt_money,
                          fmt_name, FormCancelled)
from realty.commands.common import (show_header, fetch_one, count_dependents, apply_update,
                                    confirm_cleanup, print_dependents, wants_filter)

console = Console()
logger = logging.getLogger(__name__)

TENANT_COLUMNS = ('first_name', 'last_name', 'email', 'phone')

BLOCKING_CHECKS = [
    ("active or pending lease(s)",
     "SELECT COUNT(*) AS total FROM lease WHERE tenant_id = %s AND status IN ('active', 'pending')"),
]

HISTORY_CHECKS = [
    ("ended lease(s)",
     "SELECT COUNT(*) AS total FROM lease WHERE tenant_id = %s AND status IN ('expired', 'terminated')"),
    ("payment(s) on ended leases",
     """SELECT COUNT(*) AS total FROM payment pay
        JOIN lease l ON l.lease_id = pay.lease_id
        WHERE l.tenant_id = %s"""),
]

# ============================================================================
# DATA ACCESS
# ============================================================================

def insert_tenant(first_name, last_name, email=None, phone=None):
    tenant_id = execute_insert("""
        INSERT INTO tenant (first_name, last_name, email, phone)
        VALUES (%s, %s, %s, %s)
        RETURNING tenant_id
    """, (first_name, last_name, email, phone))
    logger.info("Created tenant %s (%s %s)", tenant_id, first_name, last_name)
    return tenant_id


def fetch_tenant(tenant_id):
    return fetch_one("SELECT * FROM tenant WHERE tenant_id = %s", (tenant_id,), f"Tenant {tenant_id}")


def update_tenant(tenant_id, **values):
    return apply_update('tenant', 'tenant_id', tenant_id, values, TENANT_COLUMNS)


def tenant_list_query(name=None):
    query = """
        SELECT t.tenant_id, t.first_name, t.last_name, t.email, t.phone,
               COUNT(l.lease_id) FILTER (WHERE l.status = 'active') AS active_leases
        FROM tenant t
        LEFT JOIN lease l ON l.tenant_id = t.tenant_id
    """
    params = []
    if name:
        query += " WHERE (t.first_name || ' ' || t.last_name) ILIKE %s"
        params.append(f"%{name}%")
    query += """
        GROUP BY t.tenant_id, t.first_name, t.last_name, t.email, t.phone
        ORDER BY t.last_name, t.first_name, t.tenant_id
    """
    return query, params


def delete_tenant(tenant_id):
    """
    Delete a tenant together with their ended leases and payments.

    Raises DeleteBlocked while the tenant has an active or pending lease.
    """
    fetch_tenant(tenant_id)
    blocking = count_dependents(BLOCKING_CHECKS, tenant_id)
    if blocking:
        raise DeleteBlocked('tenant', tenant_id, blocking)

    with transaction() as cur:
        cur.execute("""
            DELETE FROM payment
            WHERE lease_id IN (SELECT lease_id FROM lease WHERE tenant_id = %s)
        """, (tenant_id,))
        cur.execute("DELETE FROM lease WHERE tenant_id = %s", (tenant_id,))
        cur.execute("DELETE FROM tenant WHERE tenant_id = %s", (tenant_id,))
        count = cur.rowcount
    logger.info("Deleted tenant %s", tenant_id)
    return count

# ============================================================================
# INTERACTIVE HANDLERS
# ============================================================================

def _ask_tenant_fields(current=None):
    current = current or {}
    return {
        'first_name': ask("First Name", default=current.get('first_name')),
        'last_name': ask("Last Name", default=current.get('last_name')),
        'email': ask("Email", parse_email, default=current.get('email'), required=False),
        'phone': ask("Phone", parse_phone, default=current.get('phone'), required=False),
    }


def create_tenant():
    """Add a new tenant"""
    show_header("New Tenant")
    console.print("[dim]Type q at any prompt to cancel[/dim]\n")
    try:
        fields = _ask_tenant_fields()
    except FormCancelled:
        console.print("[yellow]Cancelled[/yellow]")
        return
    tenant_id = insert_tenant(**fields)
    console.print(f"[green]✓ Tenant {tenant_id} created[/green]")


def list_tenants():
    """List tenants, optionally filtered by name"""
    name = ask("Filter by name (blank for all)", required=False) if wants_filter() else None
    query, params = tenant_list_query(name)
    browse(
        query_paginator(query, params),
        "Tenants",
        [("ID", {"style": "cyan"}), ("Name", {"style": "green"}), ("Email", {}),
         ("Phone", {"style": "yellow"}), ("Active Leases", {"justify": "right"})],
        lambda t: (str(t['tenant_id']), fmt_name(t), t['email'] or '', t['phone'] or '',
                   str(t['active_leases'])),
        empty_message="No tenants found",
    )


def show_tenant():
    """Show one tenant with their lease history"""
    tenant_id = ask_id("Tenant ID")
    if tenant_id is None:
        return
    t = fetch_tenant(tenant_id)
    console.print(f"\n[bold cyan]Tenant #{t['tenant_id']}: {fmt_name(t)}[/bold cyan]")
    console.print(f"Email: {t['email'] or 'Not set'}")
    console.print(f"Phone: {t['phone'] or 'Not set'}")

    leases = execute_query("""
        SELECT l.lease_id, l.start_date, l.end_date, l.monthly_rent, l.status, p.address
        FROM lease l
        JOIN property p ON p.property_id = l.property_id
        WHERE l.tenant_id = %s
        ORDER BY l.start_date DESC
    """, (tenant_id,))
    if not leases:
        console.print("\n[yellow]No leases[/yellow]")
        return
    console.print(f"\n[bold]Leases ({len(leases)}):[/bold]")
    for lease in leases:
        console.print(f"  • #{lease['lease_id']} {lease['address']}  "
                      f"{fmt_date(lease['start_date'])} to {fmt_date(lease['end_date'])}  "
                      f"{fmt_money(lease['monthly_rent'])}/mo  ({lease['status']})")


def edit_tenant():
    """Update a tenant's contact details"""
    tenant_id = ask_id("Tenant ID")
    if tenant_id is None:
        return
    current = fetch_tenant(tenant_id)
    console.print("[dim]Press Enter to keep current value, - to clear an optional field, q to cancel[/dim]\n")
    try:
        fields = _ask_tenant_fields(current)
    except FormCancelled:
        console.print("[yellow]Update cancelled[/yellow]")
        return
    update_tenant(tenant_id, **fields)
    console.print(f"[green]✓ Tenant {tenant_id} updated[/green]")


def remove_tenant():
    """Delete a tenant after the dependency check"""
    tenant_id = ask_id("Tenant ID to delete")
    if tenant_id is None:
        return
    fetch_tenant(tenant_id)
    blocking = count_dependents(BLOCKING_CHECKS, tenant_id)
    if blocking:
        print_dependents(DeleteBlocked('tenant', tenant_id, blocking))
        return
    if not confirm_cleanup('tenant', tenant_id, count_dependents(HISTORY_CHECKS, tenant_id)):
        console.print("[yellow]Cancelled[/yellow]")
        return
    delete_tenant(tenant_id)
    console.print(f"[green]✓ Tenant {tenant_id} deleted[/green]")
