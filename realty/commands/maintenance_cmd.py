"""
Maintenance requests

Requests are opened against a property and move open → in_progress →
closed. Closing a request stamps its closed_date; reopening clears it.
"""
import logging
from datetime import date

from rich.console import Console

from realty.db import execute_query, execute_insert, execute_command
from realty.errors import ValidationError
from realty.paging import browse, query_paginator
from realty.utils import ask, ask_choice, ask_date, ask_id, fmt_date, FormCancelled
from realty.commands.common import show_header, fetch_one, apply_update, confirm_cleanup, wants_filter

console = Console()
logger = logging.getLogger(__name__)

REQUEST_STATUSES = ['open', 'in_progress', 'closed']
PRIORITIES = ['low', 'medium', 'high']

REQUEST_COLUMNS = ('description', 'priority', 'status', 'opened_date', 'closed_date')


def insert_request(property_id, description, priority='medium', opened_date=None):
    if not execute_query("SELECT 1 FROM property WHERE property_id = %s", (property_id,)):
        raise ValidationError(f"Property {property_id} does not exist")
    if priority not in PRIORITIES:
        raise ValidationError(f"Priority must be one of: {', '.join(PRIORITIES)}")

    request_id = execute_insert("""
        INSERT INTO maintenance_request (property_id, description, priority, status, opened_date)
        VALUES (%s, %s, %s, 'open', %s)
        RETURNING request_id
    """, (property_id, description, priority, opened_date or date.today()))
    logger.info("Opened maintenance request %s on property %s", request_id, property_id)
    return request_id


def fetch_request(request_id):
    return fetch_one("""
        SELECT m.*, p.address
        FROM maintenance_request m
        JOIN property p ON p.property_id = m.property_id
        WHERE m.request_id = %s
    """, (request_id,), f"Maintenance request {request_id}")


def update_request(request_id, **values):
    return apply_update('maintenance_request', 'request_id', request_id, values, REQUEST_COLUMNS)


def set_request_status(request_id, status, closed_on=None):
    if status not in REQUEST_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(REQUEST_STATUSES)}")
    current = fetch_request(request_id)
    closed_date = None
    if status == 'closed':
        closed_date = closed_on or date.today()
        if closed_date < current['opened_date']:
            raise ValidationError("A request cannot be closed before it was opened")
    count = update_request(request_id, status=status, closed_date=closed_date)
    logger.info("Maintenance request %s marked %s", request_id, status)
    return count


def delete_request(request_id):
    fetch_request(request_id)
    count = execute_command("DELETE FROM maintenance_request WHERE request_id = %s", (request_id,))
    logger.info("Deleted maintenance request %s", request_id)
    return count


def request_list_query(status=None, property_id=None):
    query = """
        SELECT m.request_id, m.property_id, p.address, m.description, m.priority,
               m.status, m.opened_date, m.closed_date
        FROM maintenance_request m
        JOIN property p ON p.property_id = m.property_id
        WHERE 1=1
    """
    params = []
    if status:
        query += " AND m.status = %s"
        params.append(status)
    if property_id:
        query += " AND m.property_id = %s"
        params.append(property_id)
    query += " ORDER BY m.opened_date DESC, m.request_id DESC"
    return query, params


def open_request():
    """Open a new maintenance request"""
    show_header("New Maintenance Request")
    property_id = ask_id("Property ID")
    if property_id is None:
        return
    try:
        description = ask("Description")
        priority = ask_choice("Priority", PRIORITIES, default='medium')
        opened_date = ask_date("Opened", date.today())
    except FormCancelled:
        console.print("[yellow]Cancelled[/yellow]")
        return
    request_id = insert_request(property_id, description, priority, opened_date)
    console.print(f"[green]✓ Request {request_id} opened for property {property_id}[/green]")


def list_requests():
    """List requests, optionally filtered by status"""
    status = ask_choice("Status (blank for all)", REQUEST_STATUSES, required=False) \
        if wants_filter() else None
    query, params = request_list_query(status)
    browse(
        query_paginator(query, params),
        "Maintenance Requests",
        [("ID", {"style": "cyan"}), ("Property", {}), ("Description", {}),
         ("Priority", {}), ("Status", {"style": "yellow"}), ("Opened", {}), ("Closed", {})],
        lambda m: (str(m['request_id']), f"#{m['property_id']} {m['address']}",
                   m['description'][:40], m['priority'], m['status'],
                   fmt_date(m['opened_date']), fmt_date(m['closed_date'])),
        empty_message="No maintenance requests found",
    )


def edit_request():
    """Update a request's description and priority"""
    request_id = ask_id("Request ID")
    if request_id is None:
        return
    current = fetch_request(request_id)
    console.print("[dim]Press Enter to keep current value, q to cancel[/dim]\n")
    try:
        values = {
            'description': ask("Description", default=current['description']),
            'priority': ask_choice("Priority", PRIORITIES, default=current['priority']),
        }
    except FormCancelled:
        console.print("[yellow]Update cancelled[/yellow]")
        return
    update_request(request_id, **values)
    console.print(f"[green]✓ Request {request_id} updated[/green]")


def change_request_status():
    """Move a request to a new status"""
    request_id = ask_id("Request ID")
    if request_id is None:
        return
    current = fetch_request(request_id)
    console.print(f"#{request_id} {current['description']} ({current['status']})")
    try:
        status = ask_choice("New Status", REQUEST_STATUSES, default=current['status'])
        closed_on = ask_date("Closed On", date.today()) if status == 'closed' else None
    except FormCancelled:
        console.print("[yellow]Cancelled[/yellow]")
        return
    set_request_status(request_id, status, closed_on)
    console.print(f"[green]✓ Request {request_id} is now {status}[/green]")


def remove_request():
    """Delete a maintenance request"""
    request_id = ask_id("Request ID to delete")
    if request_id is None:
        return
    fetch_request(request_id)
    if not confirm_cleanup('maintenance request', request_id, {}):
        console.print("[yellow]Cancelled[/yellow]")
        return
    delete_request(request_id)
    console.print(f"[green]✓ Request {request_id} deleted[/green]")
