"""
Property ownership shares (property_owner)

Each row gives one owner's percentage of one property. The shares of a
property may add up to less than 100 while ownership is being set up, but
never to more: every insert and update checks the other owners' total
inside the same transaction, with the property row locked.
"""
import logging
from decimal import Decimal

from rich.console import Console

from realty.db import execute_query, execute_command, transaction
from realty.errors import NotFound, ValidationError
from realty.paging import browse, query_paginator
from realty.utils import ask, ask_id, parse_percentage, fmt_money, fmt_pct, fmt_name, FormCancelled
from realty.commands.common import show_header, confirm_cleanup, wants_filter

console = Console()
logger = logging.getLogger(__name__)

FULL_OWNERSHIP = Decimal('100')

# ============================================================================
# DATA ACCESS
# ============================================================================

def _lock_and_total(cur, property_id, owner_id):
    """Lock the property and return the share held by everyone but owner_id"""
    cur.execute("SELECT property_id FROM property WHERE property_id = %s FOR UPDATE", (property_id,))
    if cur.fetchone() is None:
        raise NotFound(f"Property {property_id} not found")
    cur.execute("SELECT owner_id FROM owner WHERE owner_id = %s", (owner_id,))
    if cur.fetchone() is None:
        raise NotFound(f"Owner {owner_id} not found")
    cur.execute("""
        SELECT COALESCE(SUM(ownership_percentage), 0)
        FROM property_owner
        WHERE property_id = %s AND owner_id <> %s
    """, (property_id, owner_id))
    return cur.fetchone()[0]


def _check_total(property_id, others, percentage):
    if others + percentage > FULL_OWNERSHIP:
        available = FULL_OWNERSHIP - others
        raise ValidationError(
            f"Property {property_id} already has {others}% assigned; "
            f"at most {available}% is available"
        )


def allocated_percentage(property_id):
    """Total share of a property currently assigned to owners"""
    rows = execute_query("""
        SELECT COALESCE(SUM(ownership_percentage), 0) AS total
        FROM property_owner
        WHERE property_id = %s
    """, (property_id,))
    return rows[0]['total']


def insert_ownership(property_id, owner_id, percentage):
    """Give an owner a new share of a property"""
    percentage = parse_percentage(percentage)
    with transaction() as cur:
        others = _lock_and_total(cur, property_id, owner_id)
        cur.execute("SELECT 1 FROM property_owner WHERE property_id = %s AND owner_id = %s",
                    (property_id, owner_id))
        if cur.fetchone() is not None:
            raise ValidationError(
                f"Owner {owner_id} already holds a share of property {property_id}; update it instead"
            )
        _check_total(property_id, others, percentage)
        cur.execute("""
            INSERT INTO property_owner (property_id, owner_id, ownership_percentage)
            VALUES (%s, %s, %s)
        """, (property_id, owner_id, percentage))
    logger.info("Owner %s now holds %s%% of property %s", owner_id, percentage, property_id)


def update_ownership(property_id, owner_id, percentage):
    """Change an existing share"""
    percentage = parse_percentage(percentage)
    with transaction() as cur:
        others = _lock_and_total(cur, property_id, owner_id)
        _check_total(property_id, others, percentage)
        cur.execute("""
            UPDATE property_owner
            SET ownership_percentage = %s
            WHERE property_id = %s AND owner_id = %s
        """, (percentage, property_id, owner_id))
        if cur.rowcount == 0:
            raise NotFound(f"Owner {owner_id} holds no share of property {property_id}")
    logger.info("Owner %s share of property %s changed to %s%%", owner_id, property_id, percentage)


def delete_ownership(property_id, owner_id):
    count = execute_command("""
        DELETE FROM property_owner
        WHERE property_id = %s AND owner_id = %s
    """, (property_id, owner_id))
    if count == 0:
        raise NotFound(f"Owner {owner_id} holds no share of property {property_id}")
    logger.info("Removed owner %s from property %s", owner_id, property_id)
    return count


def ownership_list_query(property_id=None):
    query = """
        SELECT po.property_id, p.address, p.purchase_price,
               po.owner_id, o.first_name, o.last_name, po.ownership_percentage,
               SUM(po.ownership_percentage) OVER (PARTITION BY po.property_id) AS property_total
        FROM property_owner po
        JOIN property p ON p.property_id = po.property_id
        JOIN owner o ON o.owner_id = po.owner_id
    """
    params = []
    if property_id:
        query += " WHERE po.property_id = %s"
        params.append(property_id)
    query += " ORDER BY po.property_id, po.ownership_percentage DESC, po.owner_id"
    return query, params


def under_allocated_properties():
    """Properties whose owners' shares add up to less than 100%"""
    return execute_query("""
        SELECT p.property_id, p.address,
               COALESCE(SUM(po.ownership_percentage), 0) AS allocated
        FROM property p
        LEFT JOIN property_owner po ON po.property_id = p.property_id
        GROUP BY p.property_id, p.address
        HAVING COALESCE(SUM(po.ownership_percentage), 0) < 100
        ORDER BY p.property_id
    """)

# ============================================================================
# INTERACTIVE HANDLERS
# ============================================================================

def _ask_link():
    property_id = ask_id("Property ID")
    if property_id is None:
        return None, None
    owner_id = ask_id("Owner ID")
    if owner_id is None:
        return None, None
    return property_id, owner_id


def assign_owner():
    """Give an owner a share of a property"""
    show_header("Assign Ownership")
    property_id, owner_id = _ask_link()
    if property_id is None:
        return
    console.print(f"[dim]Currently assigned: {fmt_pct(allocated_percentage(property_id))}[/dim]")
    try:
        percentage = ask("Ownership %", parse_percentage)
    except FormCancelled:
        console.print("[yellow]Cancelled[/yellow]")
        return
    insert_ownership(property_id, owner_id, percentage)
    console.print(f"[green]✓ Owner {owner_id} holds {fmt_pct(percentage)} of property {property_id}[/green]")


def list_ownership():
    """List ownership shares, optionally for one property"""
    property_id = ask_id("Property ID (blank for all)") if wants_filter() else None
    query, params = ownership_list_query(property_id)
    browse(
        query_paginator(query, params),
        "Property Ownership",
        [("Property", {"style": "cyan"}), ("Address", {}),
         ("Owner", {"style": "green"}), ("Share", {"justify": "right"}),
         ("Share Value", {"style": "green", "justify": "right"}),
         ("Property Total", {"justify": "right"})],
        lambda r: (
            str(r['property_id']),
            r['address'],
            f"{fmt_name(r)} (#{r['owner_id']})",
            fmt_pct(r['ownership_percentage']),
            fmt_money(r['purchase_price'] * r['ownership_percentage'] / 100),
            fmt_pct(r['property_total']),
        ),
        empty_message="No ownership records found",
    )

    pending = under_allocated_properties()
    if pending:
        console.print("\n[yellow]Properties not fully allocated:[/yellow]")
        for p in pending:
            console.print(f"  • #{p['property_id']} {p['address']}: {fmt_pct(p['allocated'])}")


def change_share():
    """Change an owner's share of a property"""
    property_id, owner_id = _ask_link()
    if property_id is None:
        return
    try:
        percentage = ask("New Ownership %", parse_percentage)
    except FormCancelled:
        console.print("[yellow]Update cancelled[/yellow]")
        return
    update_ownership(property_id, owner_id, percentage)
    console.print(f"[green]✓ Share updated to {fmt_pct(percentage)}[/green]")


def remove_owner_link():
    """Remove an owner from a property"""
    property_id, owner_id = _ask_link()
    if property_id is None:
        return
    if not confirm_cleanup('ownership link', f"{owner_id}→{property_id}", {}):
        console.print("[yellow]Cancelled[/yellow]")
        return
    delete_ownership(property_id, owner_id)
    console.print(f"[green]✓ Owner {owner_id} removed from property {property_id}[/green]")
