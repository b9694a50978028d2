"""
Rent payments recorded against leases
"""
import logging
from decimal import Decimal

from rich.console import Console

from realty.db import execute_query, execute_insert, execute_command
from realty.errors import ValidationError
from realty.paging import browse, query_paginator
from realty.utils import ask_choice, ask_date, ask_decimal, ask_id, fmt_date, fmt_money, fmt_name, FormCancelled
from realty.commands.common import show_header, fetch_one, apply_update, confirm_cleanup, wants_filter

console = Console()
logger = logging.getLogger(__name__)

PAYMENT_METHODS = ['cash', 'check', 'bank_transfer', 'card']

PAYMENT_COLUMNS = ('amount', 'payment_date', 'payment_method')


def insert_payment(lease_id, amount, payment_date, payment_method='bank_transfer'):
    if not execute_query("SELECT 1 FROM lease WHERE lease_id = %s", (lease_id,)):
        raise ValidationError(f"Lease {lease_id} does not exist")
    if amount <= 0:
        raise ValidationError("Payment amount must be greater than 0")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError(f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}")

    payment_id = execute_insert("""
        INSERT INTO payment (lease_id, amount, payment_date, payment_method)
        VALUES (%s, %s, %s, %s)
        RETURNING payment_id
    """, (lease_id, amount, payment_date, payment_method))
    logger.info("Recorded payment %s of %s on lease %s", payment_id, amount, lease_id)
    return payment_id


def fetch_payment(payment_id):
    return fetch_one("SELECT * FROM payment WHERE payment_id = %s", (payment_id,),
                     f"Payment {payment_id}")


def update_payment(payment_id, **values):
    if 'amount' in values and values['amount'] <= 0:
        raise ValidationError("Payment amount must be greater than 0")
    return apply_update('payment', 'payment_id', payment_id, values, PAYMENT_COLUMNS)


def delete_payment(payment_id):
    fetch_payment(payment_id)
    count = execute_command("DELETE FROM payment WHERE payment_id = %s", (payment_id,))
    logger.info("Deleted payment %s", payment_id)
    return count


def payment_list_query(lease_id=None):
    query = """
        SELECT pay.payment_id, pay.lease_id, pay.amount, pay.payment_date, pay.payment_method,
               t.first_name, t.last_name, p.address
        FROM payment pay
        JOIN lease l ON l.lease_id = pay.lease_id
        JOIN tenant t ON t.tenant_id = l.tenant_id
        JOIN property p ON p.property_id = l.property_id
    """
    params = []
    if lease_id:
        query += " WHERE pay.lease_id = %s"
        params.append(lease_id)
    query += " ORDER BY pay.payment_date DESC, pay.payment_id DESC"
    return query, params


def _ask_payment_fields(current):
    return {
        'amount': ask_decimal("Amount", current.get('amount'), minimum=Decimal('0'),
                              exclusive_minimum=True, max_digits=10),
        'payment_date': ask_date("Payment Date", current.get('payment_date')),
        'payment_method': ask_choice("Method", PAYMENT_METHODS,
                                     default=current.get('payment_method', 'bank_transfer')),
    }


def record_payment():
    """Record a rent payment"""
    show_header("Record Payment")
    lease_id = ask_id("Lease ID")
    if lease_id is None:
        return
    try:
        fields = _ask_payment_fields({})
    except FormCancelled:
        console.print("[yellow]Cancelled[/yellow]")
        return
    payment_id = insert_payment(lease_id, **fields)
    console.print(f"[green]✓ Payment {payment_id} recorded on lease {lease_id}[/green]")


def list_payments():
    """List payments, newest first, optionally for one lease"""
    lease_id = ask_id("Lease ID (blank for all)") if wants_filter() else None
    query, params = payment_list_query(lease_id)
    browse(
        query_paginator(query, params),
        "Payments",
        [("ID", {"style": "cyan"}), ("Lease", {"justify": "right"}), ("Tenant", {"style": "green"}),
         ("Property", {}), ("Date", {}), ("Amount", {"style": "green", "justify": "right"}),
         ("Method", {})],
        lambda r: (str(r['payment_id']), str(r['lease_id']), fmt_name(r), r['address'],
                   fmt_date(r['payment_date']), fmt_money(r['amount']), r['payment_method']),
        empty_message="No payments found",
    )


def edit_payment():
    """Correct a recorded payment"""
    payment_id = ask_id("Payment ID")
    if payment_id is None:
        return
    current = fetch_payment(payment_id)
    console.print("[dim]Press Enter to keep current value, q to cancel[/dim]\n")
    try:
        fields = _ask_payment_fields(current)
    except FormCancelled:
        console.print("[yellow]Update cancelled[/yellow]")
        return
    update_payment(payment_id, **fields)
    console.print(f"[green]✓ Payment {payment_id} updated[/green]")


def remove_payment():
    """Delete a payment"""
    payment_id = ask_id("Payment ID to delete")
    if payment_id is None:
        return
    p = fetch_payment(payment_id)
    console.print(f"{fmt_money(p['amount'])} on {fmt_date(p['payment_date'])} (lease #{p['lease_id']})")
    if not confirm_cleanup('payment', payment_id, {}):
        console.print("[yellow]Cancelled[/yellow]")
        return
    delete_payment(payment_id)
    console.print(f"[green]✓ Payment {payment_id} deleted[/green]")
