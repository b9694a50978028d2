"""
Property management

Properties carry their physical attributes and purchase details. Rent lives
on leases and ownership shares live in property_owner; both are shown here
for context.

Deleting a property is refused while it has active or pending leases or
unresolved maintenance requests. Its history (ownership links, ended leases
and their payments, closed requests) is removed with it after confirmation.
"""
import logging
from datetime import date
from decimal import Decimal

from rich.console import Console

from realty.db import execute_query, execute_insert, transaction
from realty.errors import DeleteBlocked
from realty.paging import browse, query_paginator
from realty.utils import (ask, ask_choice, ask_date, ask_decimal, ask_id, ask_int, parse_state,
                          parse_zip, fmt_date, fmt_money, fmt_pct, fmt_name, FormCancelled)
from realty.commands.common import (show_header, fetch_one, count_dependents, apply_update,
                                    confirm_cleanup, print_dependents, wants_filter)

console = Console()
logger = logging.getLogger(__name__)

PROPERTY_TYPES = ['single_family', 'multi_family', 'condo', 'townhouse', 'commercial']

PROPERTY_COLUMNS = ('address', 'city', 'state', 'zip_code', 'property_type', 'bedrooms',
                    'bathrooms', 'square_feet', 'year_built', 'purchase_price', 'purchase_date')

BLOCKING_CHECKS = [
    ("active or pending lease(s)",
     "SELECT COUNT(*) AS total FROM lease WHERE property_id = %s AND status IN ('active', 'pending')"),
    ("open maintenance request(s)",
     "SELECT COUNT(*) AS total FROM maintenance_request WHERE property_id = %s AND status <> 'closed'"),
]

HISTORY_CHECKS = [
    ("ownership link(s)", "SELECT COUNT(*) AS total FROM property_owner WHERE property_id = %s"),
    ("ended lease(s)",
     "SELECT COUNT(*) AS total FROM lease WHERE property_id = %s AND status IN ('expired', 'terminated')"),
    ("payment(s) on ended leases",
     """SELECT COUNT(*) AS total FROM payment pay
        JOIN lease l ON l.lease_id = pay.lease_id
        WHERE l.property_id = %s"""),
    ("closed maintenance request(s)",
     "SELECT COUNT(*) AS total FROM maintenance_request WHERE property_id = %s AND status = 'closed'"),
]

# ============================================================================
# DATA ACCESS
# ============================================================================

def insert_property(address, city, state, property_type, purchase_price, purchase_date,
                    zip_code=None, bedrooms=None, bathrooms=None, square_feet=None,
                    year_built=None):
    property_id = execute_insert("""
        INSERT INTO property
        (address, city, state, zip_code, property_type, bedrooms, bathrooms,
         square_feet, year_built, purchase_price, purchase_date)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING property_id
    """, (address, city, state, zip_code, property_type, bedrooms, bathrooms,
          square_feet, year_built, purchase_price, purchase_date))
    logger.info("Created property %s (%s)", property_id, address)
    return property_id


def fetch_property(property_id):
    return fetch_one("SELECT * FROM property WHERE property_id = %s", (property_id,),
                     f"Property {property_id}")


def update_property(property_id, **values):
    return apply_update('property', 'property_id', property_id, values, PROPERTY_COLUMNS)


def property_list_query(city=None, property_type=None):
    query = """
        SELECT p.property_id, p.address, p.city, p.state, p.property_type,
               p.bedrooms, p.bathrooms, p.purchase_price, p.purchase_date,
               (SELECT l.monthly_rent FROM lease l
                WHERE l.property_id = p.property_id AND l.status = 'active'
                ORDER BY l.start_date DESC LIMIT 1) AS current_rent
        FROM property p
        WHERE 1=1
    """
    params = []
    if city:
        query += " AND p.city ILIKE %s"
        params.append(city)
    if property_type:
        query += " AND p.property_type = %s"
        params.append(property_type)
    query += " ORDER BY p.property_id"
    return query, params


def property_owners(property_id):
    return execute_query("""
        SELECT o.owner_id, o.first_name, o.last_name, po.ownership_percentage
        FROM property_owner po
        JOIN owner o ON o.owner_id = po.owner_id
        WHERE po.property_id = %s
        ORDER BY po.ownership_percentage DESC, o.owner_id
    """, (property_id,))


def property_history(property_id):
    return count_dependents(HISTORY_CHECKS, property_id)


def delete_property(property_id):
    """
    Delete a property and its history in one transaction.

    Raises DeleteBlocked while active/pending leases or unresolved
    maintenance requests reference it.
    """
    fetch_property(property_id)
    blocking = count_dependents(BLOCKING_CHECKS, property_id)
    if blocking:
        raise DeleteBlocked('property', property_id, blocking)

    with transaction() as cur:
        cur.execute("""
            DELETE FROM payment
            WHERE lease_id IN (SELECT lease_id FROM lease WHERE property_id = %s)
        """, (property_id,))
        cur.execute("DELETE FROM lease WHERE property_id = %s", (property_id,))
        cur.execute("DELETE FROM maintenance_request WHERE property_id = %s", (property_id,))
        cur.execute("DELETE FROM property_owner WHERE property_id = %s", (property_id,))
        cur.execute("DELETE FROM property WHERE property_id = %s", (property_id,))
        count = cur.rowcount
    logger.info("Deleted property %s", property_id)
    return count

# ============================================================================
# INTERACTIVE HANDLERS
# ============================================================================

def _ask_property_fields(current=None):
    current = current or {}
    console.print("[bold]Location:[/bold]")
    fields = {
        'address': ask("Street Address", default=current.get('address')),
        'city': ask("City", default=current.get('city')),
        'state': ask("State (2-letter)", parse_state, default=current.get('state')),
        'zip_code': ask("ZIP Code", parse_zip, default=current.get('zip_code'), required=False),
        'property_type': ask_choice("Type", PROPERTY_TYPES, default=current.get('property_type')),
    }
    console.print("\n[bold]Physical Attributes:[/bold]")
    fields['bedrooms'] = ask_int("Bedrooms", current.get('bedrooms'), required=False,
                                 minimum=0, maximum=100)
    fields['bathrooms'] = ask_decimal("Bathrooms", current.get('bathrooms'), required=False,
                                      minimum=Decimal('0'), places=1, max_digits=3)
    fields['square_feet'] = ask_int("Square Feet", current.get('square_feet'), required=False,
                                    minimum=1, maximum=2_000_000_000)
    fields['year_built'] = ask_int("Year Built", current.get('year_built'), required=False,
                                   minimum=1800, maximum=date.today().year + 1)
    console.print("\n[bold]Purchase Information:[/bold]")
    fields['purchase_price'] = ask_decimal("Purchase Price", current.get('purchase_price'),
                                           minimum=Decimal('0'), exclusive_minimum=True, max_digits=12)
    fields['purchase_date'] = ask_date("Purchase Date", current.get('purchase_date'))
    return fields


def create_property():
    """Add a new property"""
    show_header("New Property")
    console.print("[dim]Type q at any prompt to cancel[/dim]\n")
    try:
        fields = _ask_property_fields()
    except FormCancelled:
        console.print("[yellow]Cancelled[/yellow]")
        return
    property_id = insert_property(**fields)
    console.print(f"[green]✓ Property {property_id} created[/green]")
    console.print("[dim]Assign owners from the Ownership menu[/dim]")


def list_properties():
    """List properties, optionally filtered by city or type"""
    city = property_type = None
    if wants_filter():
        city = ask("City (blank for any)", required=False)
        property_type = ask_choice("Type (blank for any)", PROPERTY_TYPES, required=False)
    query, params = property_list_query(city, property_type)
    browse(
        query_paginator(query, params),
        "Properties",
        [("ID", {"style": "cyan"}), ("Address", {}), ("Type", {}),
         ("Bed/Bath", {"justify": "center"}),
         ("Purchase Price", {"style": "green", "justify": "right"}),
         ("Purchased", {}),
         ("Current Rent", {"style": "yellow", "justify": "right"})],
        lambda p: (
            str(p['property_id']),
            f"{p['address']}, {p['city']}, {p['state']}",
            p['property_type'],
            f"{p['bedrooms'] if p['bedrooms'] is not None else '-'}/"
            f"{p['bathrooms'] if p['bathrooms'] is not None else '-'}",
            fmt_money(p['purchase_price']),
            fmt_date(p['purchase_date']),
            f"{fmt_money(p['current_rent'])}/mo" if p['current_rent'] else 'Vacant',
        ),
        empty_message="No properties found",
    )


def show_property():
    """Show detailed property information"""
    property_id = ask_id("Property ID")
    if property_id is None:
        return
    prop = fetch_property(property_id)

    console.print(f"\n[bold cyan]Property #{prop['property_id']}[/bold cyan]")
    console.print(f"Address: {prop['address']}")
    console.print(f"Location: {prop['city']}, {prop['state']} {prop['zip_code'] or ''}")
    console.print(f"Type: {prop['property_type']}")
    if prop['bedrooms'] is not None or prop['bathrooms'] is not None:
        console.print(f"Bedrooms/Bathrooms: {prop['bedrooms'] or 0}/{prop['bathrooms'] or 0}")
    if prop['square_feet']:
        console.print(f"Size: {prop['square_feet']:,} sq ft")
    if prop['year_built']:
        console.print(f"Year Built: {prop['year_built']}")

    console.print("\n[bold]Purchase Information:[/bold]")
    console.print(f"Date: {fmt_date(prop['purchase_date'])}")
    console.print(f"Price: {fmt_money(prop['purchase_price'])}")

    owners = property_owners(property_id)
    if owners:
        total = sum(o['ownership_percentage'] for o in owners)
        console.print(f"\n[bold]Owners ({fmt_pct(total)} allocated):[/bold]")
        for o in owners:
            console.print(f"  • {fmt_name(o)} (#{o['owner_id']}) {fmt_pct(o['ownership_percentage'])}")
        if total < 100:
            console.print(f"[yellow]  {fmt_pct(100 - total)} not yet assigned[/yellow]")
    else:
        console.print("\n[yellow]No owners assigned[/yellow]")

    leases = execute_query("""
        SELECT l.lease_id, l.start_date, l.end_date, l.monthly_rent, t.first_name, t.last_name
        FROM lease l
        JOIN tenant t ON t.tenant_id = l.tenant_id
        WHERE l.property_id = %s AND l.status = 'active'
        ORDER BY l.start_date DESC
    """, (property_id,))
    if leases:
        lease = leases[0]
        console.print("\n[bold]Current Lease:[/bold]")
        console.print(f"Tenant: {fmt_name(lease)} (lease #{lease['lease_id']})")
        console.print(f"Term: {fmt_date(lease['start_date'])} to {fmt_date(lease['end_date'])}")
        console.print(f"Rent: {fmt_money(lease['monthly_rent'])}/mo")
    else:
        console.print("\n[yellow]No active lease[/yellow]")


def edit_property():
    """Update property information"""
    property_id = ask_id("Property ID")
    if property_id is None:
        return
    current = fetch_property(property_id)
    console.print("[dim]Press Enter to keep current value, - to clear an optional field, q to cancel[/dim]\n")
    try:
        fields = _ask_property_fields(current)
    except FormCancelled:
        console.print("[yellow]Update cancelled[/yellow]")
        return
    update_property(property_id, **fields)
    console.print(f"[green]✓ Property {property_id} updated[/green]")


def remove_property():
    """Delete a property after the dependency check"""
    property_id = ask_id("Property ID to delete")
    if property_id is None:
        return
    fetch_property(property_id)
    blocking = count_dependents(BLOCKING_CHECKS, property_id)
    if blocking:
        print_dependents(DeleteBlocked('property', property_id, blocking))
        return
    if not confirm_cleanup('property', property_id, property_history(property_id)):
        console.print("[yellow]Cancelled[/yellow]")
        return
    delete_property(property_id)
    console.print(f"[green]✓ Property {property_id} deleted[/green]")
