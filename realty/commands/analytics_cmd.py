"""
Portfolio analytics reports

Five fixed reports, each a single SQL statement. Pages are fetched by
re-running the statement with LIMIT/OFFSET, so window functions are
evaluated over the whole result before a page is cut from it.
"""
import logging
import sys

import click
import psycopg2
from rich.console import Console

from realty import db
from realty.errors import ConfigError
from realty.paging import browse, query_paginator, render_page
from realty.utils import fmt_date, fmt_money, fmt_pct, fmt_name

console = Console()
logger = logging.getLogger(__name__)


class Report:
    """A named SELECT plus the table layout used to show it"""

    def __init__(self, key, title, description, query, columns, to_row):
        self.key = key
        self.title = title
        self.description = description
        self.query = query
        self.columns = columns
        self.to_row = to_row

    def paginator(self, page_size=None):
        return query_paginator(self.query, page_size=page_size)


OLDEST_OPEN_REQUESTS = Report(
    'oldest-requests',
    "Oldest Open Maintenance Requests",
    "Open requests by age, oldest first",
    """
        SELECT m.request_id, m.property_id, p.address, m.description, m.priority,
               m.opened_date, (CURRENT_DATE - m.opened_date) AS age_days
        FROM maintenance_request m
        JOIN property p ON p.property_id = m.property_id
        WHERE m.status = 'open'
        ORDER BY m.opened_date ASC, m.request_id ASC
    """,
    [("Request", {"style": "cyan"}), ("Property", {}), ("Description", {}),
     ("Priority", {}), ("Opened", {}), ("Age (days)", {"style": "red", "justify": "right"})],
    lambda r: (str(r['request_id']), f"#{r['property_id']} {r['address']}",
               r['description'][:40], r['priority'], fmt_date(r['opened_date']),
               str(r['age_days'])),
)

RUNNING_PAYMENTS = Report(
    'running-payments',
    "Running Payment Totals by Tenant",
    "Cumulative payments per tenant in date order",
    """
        SELECT t.tenant_id, t.first_name, t.last_name, pay.payment_id, pay.lease_id,
               pay.payment_date, pay.amount,
               SUM(pay.amount) OVER (
                   PARTITION BY t.tenant_id
                   ORDER BY pay.payment_date, pay.payment_id
                   ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW
               ) AS running_total
        FROM payment pay
        JOIN lease l ON l.lease_id = pay.lease_id
        JOIN tenant t ON t.tenant_id = l.tenant_id
        ORDER BY t.tenant_id, pay.payment_date, pay.payment_id
    """,
    [("Tenant", {"style": "green"}), ("Lease", {"justify": "right"}), ("Date", {}),
     ("Amount", {"justify": "right"}), ("Running Total", {"style": "bold green", "justify": "right"})],
    lambda r: (f"{fmt_name(r)} (#{r['tenant_id']})", str(r['lease_id']), fmt_date(r['payment_date']),
               fmt_money(r['amount']), fmt_money(r['running_total'])),
)

RENT_YIELD = Report(
    'rent-yield',
    "Rent Yield by Property",
    "Annual rent from active leases over purchase price",
    """
        SELECT p.property_id, p.address, p.city, p.purchase_price,
               COALESCE(SUM(l.monthly_rent) FILTER (WHERE l.status = 'active'), 0) * 12 AS annual_rent,
               ROUND(COALESCE(SUM(l.monthly_rent) FILTER (WHERE l.status = 'active'), 0) * 12 * 100
                     / p.purchase_price, 2) AS rent_yield_pct
        FROM property p
        LEFT JOIN lease l ON l.property_id = p.property_id
        GROUP BY p.property_id, p.address, p.city, p.purchase_price
        ORDER BY rent_yield_pct DESC, p.property_id
    """,
    [("Property", {"style": "cyan"}), ("Address", {}),
     ("Purchase Price", {"justify": "right"}), ("Annual Rent", {"style": "green", "justify": "right"}),
     ("Yield", {"style": "bold yellow", "justify": "right"})],
    lambda r: (str(r['property_id']), f"{r['address']}, {r['city']}", fmt_money(r['purchase_price']),
               fmt_money(r['annual_rent']), fmt_pct(r['rent_yield_pct'])),
)

MAINTENANCE_RANKING = Report(
    'maintenance-ranking',
    "Properties Ranked by Open Requests",
    "Open request count per property, dense-ranked (ties share a rank)",
    """
        SELECT p.property_id, p.address, COUNT(m.request_id) AS open_requests,
               DENSE_RANK() OVER (ORDER BY COUNT(m.request_id) DESC) AS request_rank
        FROM property p
        JOIN maintenance_request m ON m.property_id = p.property_id AND m.status = 'open'
        GROUP BY p.property_id, p.address
        ORDER BY request_rank, p.property_id
    """,
    [("Rank", {"style": "bold cyan", "justify": "right"}), ("Property", {}),
     ("Open Requests", {"style": "red", "justify": "right"})],
    lambda r: (str(r['request_rank']), f"#{r['property_id']} {r['address']}", str(r['open_requests'])),
)

OWNER_VALUATION = Report(
    'owner-valuation',
    "Owner Portfolio Valuation",
    "Purchase price weighted by ownership share, per owner",
    """
        SELECT o.owner_id, o.first_name, o.last_name,
               COUNT(po.property_id) AS properties,
               SUM(p.purchase_price * po.ownership_percentage / 100) AS portfolio_value
        FROM owner o
        JOIN property_owner po ON po.owner_id = o.owner_id
        JOIN property p ON p.property_id = po.property_id
        GROUP BY o.owner_id, o.first_name, o.last_name
        ORDER BY portfolio_value DESC, o.owner_id
    """,
    [("Owner", {"style": "green"}), ("Properties", {"justify": "right"}),
     ("Portfolio Value", {"style": "bold green", "justify": "right"})],
    lambda r: (f"{fmt_name(r)} (#{r['owner_id']})", str(r['properties']), fmt_money(r['portfolio_value'])),
)

REPORTS = {
    report.key: report
    for report in (OLDEST_OPEN_REQUESTS, RUNNING_PAYMENTS, RENT_YIELD,
                   MAINTENANCE_RANKING, OWNER_VALUATION)
}


def get_report(key):
    try:
        return REPORTS[key]
    except KeyError:
        raise KeyError(f"Unknown report '{key}'. Available: {', '.join(REPORTS)}")


def run_report(key, page_size=None):
    """Browse a report page by page"""
    report = get_report(key)
    logger.info("Running report %s", key)
    browse(report.paginator(page_size), report.title, report.columns, report.to_row,
           empty_message="No data for this report")


def print_report_page(key, page=1, page_size=None):
    """Print a single page of a report (1-based page number)"""
    report = get_report(key)
    paginator = report.paginator(page_size)
    if paginator.total_rows == 0:
        console.print("[yellow]No data for this report[/yellow]")
        return
    if not 1 <= page <= paginator.pages:
        console.print(f"[red]Page {page} out of range (1-{paginator.pages})[/red]")
        return
    render_page(report.title, report.columns, paginator.page(page - 1), report.to_row,
                caption=f"Page {page} of {paginator.pages} ({paginator.total_rows} rows)")


def report_handler(key):
    """Menu handler that runs one report"""
    def handler():
        run_report(key)
    handler.__doc__ = REPORTS[key].title
    return handler


@click.command('report')
@click.argument('name', type=click.Choice(list(REPORTS)))
@click.option('--page', type=click.IntRange(min=1), default=1, show_default=True, help='Page number')
@click.option('--page-size', type=click.IntRange(min=1), default=None, help='Rows per page (default REALTY_PAGE_SIZE)')
def report(name, page, page_size):
    """Print one page of an analytics report"""
    try:
        print_report_page(name, page, page_size)
    except (psycopg2.Error, ConfigError) as e:
        logger.exception("Report %s failed", name)
        console.print(f"[red]Database error: {e}[/red]")
        sys.exit(1)
    finally:
        db.close()
