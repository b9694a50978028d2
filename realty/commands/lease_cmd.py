"""
Lease tracking and management

A lease ties one tenant to one property for a term at a monthly rent.
Status moves forward only: pending → active or terminated, active → expired
or terminated; expired and terminated are final. An active lease has to be
ended before it can be deleted.
"""
import logging
from decimal import Decimal

from rich.console import Console

from realty.db import execute_query, execute_insert, transaction
from realty.errors import DeleteBlocked, ValidationError
from realty.paging import browse, query_paginator
from realty.utils import (ask_choice, ask_date, ask_decimal, ask_id, fmt_date, fmt_money,
                          fmt_name, FormCancelled)
from realty.commands.common import (show_header, fetch_one, count_dependents, apply_update,
                                    confirm_cleanup, print_dependents, wants_filter)

console = Console()
logger = logging.getLogger(__name__)

LEASE_STATUSES = ['pending', 'active', 'expired', 'terminated']

LEASE_TRANSITIONS = {
    'pending': ('active', 'terminated'),
    'active': ('expired', 'terminated'),
    'expired': (),
    'terminated': (),
}

LEASE_COLUMNS = ('start_date', 'end_date', 'monthly_rent', 'security_deposit', 'status')

BLOCKING_CHECKS = [
    ("active lease (terminate or expire it first)",
     "SELECT COUNT(*) AS total FROM lease WHERE lease_id = %s AND status = 'active'"),
]

HISTORY_CHECKS = [
    ("payment(s)", "SELECT COUNT(*) AS total FROM payment WHERE lease_id = %s"),
]

# ============================================================================
# DATA ACCESS
# ============================================================================

def _check_term(start_date, end_date):
    if end_date <= start_date:
        raise ValidationError("Lease end date must be after the start date")


def _check_status(status):
    if status not in LEASE_STATUSES:
        raise ValidationError(f"Lease status must be one of: {', '.join(LEASE_STATUSES)}")


def _check_transition(current, status):
    if status != current and status not in LEASE_TRANSITIONS[current]:
        allowed = ', '.join(LEASE_TRANSITIONS[current]) or 'none, it is final'
        raise ValidationError(f"A {current} lease cannot become {status} (allowed: {allowed})")


def _require(table, key_column, record_id, label):
    rows = execute_query(f"SELECT 1 FROM {table} WHERE {key_column} = %s", (record_id,))
    if not rows:
        raise ValidationError(f"{label} {record_id} does not exist")


def insert_lease(property_id, tenant_id, start_date, end_date, monthly_rent,
                 security_deposit=Decimal('0'), status='active'):
    """Create a lease for an existing tenant and property"""
    _require('property', 'property_id', property_id, 'Property')
    _require('tenant', 'tenant_id', tenant_id, 'Tenant')
    _check_term(start_date, end_date)
    _check_status(status)

    lease_id = execute_insert("""
        INSERT INTO lease
        (property_id, tenant_id, start_date, end_date, monthly_rent, security_deposit, status)
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        RETURNING lease_id
    """, (property_id, tenant_id, start_date, end_date, monthly_rent, security_deposit, status))
    logger.info("Created lease %s (property %s, tenant %s)", lease_id, property_id, tenant_id)
    return lease_id


def fetch_lease(lease_id):
    return fetch_one("""
        SELECT l.*, p.address, t.first_name, t.last_name
        FROM lease l
        JOIN property p ON p.property_id = l.property_id
        JOIN tenant t ON t.tenant_id = l.tenant_id
        WHERE l.lease_id = %s
    """, (lease_id,), f"Lease {lease_id}")


def update_lease(lease_id, **values):
    current = fetch_lease(lease_id)
    _check_term(values.get('start_date', current['start_date']),
                values.get('end_date', current['end_date']))
    if 'status' in values:
        _check_status(values['status'])
        _check_transition(current['status'], values['status'])
    return apply_update('lease', 'lease_id', lease_id, values, LEASE_COLUMNS)


def set_lease_status(lease_id, status):
    _check_status(status)
    _check_transition(fetch_lease(lease_id)['status'], status)
    count = apply_update('lease', 'lease_id', lease_id, {'status': status}, LEASE_COLUMNS)
    logger.info("Lease %s marked %s", lease_id, status)
    return count


def lease_list_query(status=None, property_id=None):
    query = """
        SELECT l.lease_id, l.property_id, p.address, t.first_name, t.last_name,
               l.start_date, l.end_date, l.monthly_rent, l.status
        FROM lease l
        JOIN property p ON p.property_id = l.property_id
        JOIN tenant t ON t.tenant_id = l.tenant_id
        WHERE 1=1
    """
    params = []
    if status:
        query += " AND l.status = %s"
        params.append(status)
    if property_id:
        query += " AND l.property_id = %s"
        params.append(property_id)
    query += " ORDER BY l.property_id, l.start_date DESC, l.lease_id"
    return query, params


def delete_lease(lease_id):
    """Delete a lease that is not active, along with its payments"""
    fetch_lease(lease_id)
    blocking = count_dependents(BLOCKING_CHECKS, lease_id)
    if blocking:
        raise DeleteBlocked('lease', lease_id, blocking)

    with transaction() as cur:
        cur.execute("DELETE FROM payment WHERE lease_id = %s", (lease_id,))
        cur.execute("DELETE FROM lease WHERE lease_id = %s", (lease_id,))
        count = cur.rowcount
    logger.info("Deleted lease %s", lease_id)
    return count

# ============================================================================
# INTERACTIVE HANDLERS
# ============================================================================

def _ask_term(current):
    while True:
        start_date = ask_date("Start Date", current.get('start_date'))
        end_date = ask_date("End Date", current.get('end_date'))
        try:
            _check_term(start_date, end_date)
            return start_date, end_date
        except ValidationError as e:
            console.print(f"[yellow]{e}[/yellow]")


def create_lease():
    """Add a new lease"""
    show_header("New Lease")
    console.print("[dim]Type q at any prompt to cancel[/dim]\n")
    try:
        property_id = ask_id("Property ID")
        tenant_id = ask_id("Tenant ID") if property_id else None
        if property_id is None or tenant_id is None:
            console.print("[yellow]Cancelled[/yellow]")
            return
        start_date, end_date = _ask_term({})
        rent = ask_decimal("Monthly Rent", minimum=Decimal('0'), exclusive_minimum=True,
                            max_digits=10)
        deposit = ask_decimal("Security Deposit", default='0', minimum=Decimal('0'), max_digits=10)
        status = ask_choice("Status", LEASE_STATUSES, default='active')
    except FormCancelled:
        console.print("[yellow]Cancelled[/yellow]")
        return
    lease_id = insert_lease(property_id, tenant_id, start_date, end_date, rent, deposit, status)
    console.print(f"[green]✓ Lease {lease_id} created for property {property_id}[/green]")


def list_leases():
    """List leases, optionally filtered by status"""
    status = ask_choice("Status (blank for all)", LEASE_STATUSES, required=False) \
        if wants_filter() else None
    query, params = lease_list_query(status)
    browse(
        query_paginator(query, params),
        "Leases",
        [("ID", {"style": "cyan"}), ("Property", {}), ("Tenant", {"style": "green"}),
         ("Start Date", {}), ("End Date", {}),
         ("Monthly Rent", {"style": "green", "justify": "right"}), ("Status", {})],
        lambda l: (str(l['lease_id']), f"#{l['property_id']} {l['address']}", fmt_name(l),
                   fmt_date(l['start_date']), fmt_date(l['end_date']),
                   fmt_money(l['monthly_rent']), l['status']),
        empty_message="No leases found",
    )


def show_lease():
    """Show detailed lease information"""
    lease_id = ask_id("Lease ID")
    if lease_id is None:
        return
    lease = fetch_lease(lease_id)
    console.print(f"\n[bold cyan]Lease #{lease['lease_id']}[/bold cyan]")
    console.print(f"Property: #{lease['property_id']} - {lease['address']}")
    console.print(f"Tenant: {fmt_name(lease)} (#{lease['tenant_id']})")
    console.print(f"Period: {fmt_date(lease['start_date'])} to {fmt_date(lease['end_date'])}")
    console.print(f"Monthly Rent: {fmt_money(lease['monthly_rent'])}")
    console.print(f"Deposit: {fmt_money(lease['security_deposit'])}")
    console.print(f"Status: {lease['status']}")

    totals = execute_query("""
        SELECT COUNT(*) AS payments, COALESCE(SUM(amount), 0) AS paid
        FROM payment WHERE lease_id = %s
    """, (lease_id,))[0]
    console.print(f"\n[bold]Payments:[/bold] {totals['payments']} totalling {fmt_money(totals['paid'])}")


def edit_lease():
    """Update lease term and rent"""
    lease_id = ask_id("Lease ID")
    if lease_id is None:
        return
    current = fetch_lease(lease_id)
    console.print("[dim]Press Enter to keep current value, q to cancel[/dim]\n")
    try:
        start_date, end_date = _ask_term(current)
        values = {
            'start_date': start_date,
            'end_date': end_date,
            'monthly_rent': ask_decimal("Monthly Rent", current['monthly_rent'],
                                        minimum=Decimal('0'), exclusive_minimum=True,
                                        max_digits=10),
            'security_deposit': ask_decimal("Security Deposit", current['security_deposit'],
                                            minimum=Decimal('0'), max_digits=10),
        }
    except FormCancelled:
        console.print("[yellow]Update cancelled[/yellow]")
        return
    update_lease(lease_id, **values)
    console.print(f"[green]✓ Lease {lease_id} updated[/green]")


def change_lease_status():
    """Move a lease to a new status"""
    lease_id = ask_id("Lease ID")
    if lease_id is None:
        return
    current = fetch_lease(lease_id)
    choices = LEASE_TRANSITIONS[current['status']]
    if not choices:
        console.print(f"[yellow]Lease {lease_id} is {current['status']}; its status can no longer change[/yellow]")
        return
    try:
        status = ask_choice("New Status", list(choices), default=choices[0])
    except FormCancelled:
        console.print("[yellow]Cancelled[/yellow]")
        return
    set_lease_status(lease_id, status)
    console.print(f"[green]✓ Lease {lease_id} is now {status}[/green]")


def remove_lease():
    """Delete a lease after the dependency check"""
    lease_id = ask_id("Lease ID to delete")
    if lease_id is None:
        return
    fetch_lease(lease_id)
    blocking = count_dependents(BLOCKING_CHECKS, lease_id)
    if blocking:
        print_dependents(DeleteBlocked('lease', lease_id, blocking))
        return
    if not confirm_cleanup('lease', lease_id, count_dependents(HISTORY_CHECKS, lease_id)):
        console.print("[yellow]Cancelled[/yellow]")
        return
    delete_lease(lease_id)
    console.print(f"[green]✓ Lease {lease_id} deleted[/green]")
