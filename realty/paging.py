"""
Paged display of query results

Pages are fetched by re-running the statement with a LIMIT/OFFSET pair, so
only one page of rows is ever held in memory.
"""
import logging

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from realty import db
from realty.config import get_page_size

console = Console()
logger = logging.getLogger(__name__)


def page_count(total_rows, page_size):
    """Number of pages needed for total_rows rows (0 when there are none)"""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return -(-total_rows // page_size)


class Paginator:
    """
    Fetches numbered pages through a callback.

    fetch_page(limit, offset) must return the rows for that window; the
    total row count is taken once, when the paginator is built.
    """

    def __init__(self, fetch_page, total_rows, page_size):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.fetch_page = fetch_page
        self.total_rows = total_rows
        self.page_size = page_size

    @property
    def pages(self):
        return page_count(self.total_rows, self.page_size)

    def offset(self, index):
        return index * self.page_size

    def page(self, index):
        if not 0 <= index < self.pages:
            raise IndexError(f"page {index} out of range (0..{self.pages - 1})")
        return self.fetch_page(self.page_size, self.offset(index))

    def __iter__(self):
        for index in range(self.pages):
            yield self.page(index)


def query_paginator(query, params=None, page_size=None):
    """Build a Paginator over a SELECT statement (without LIMIT/OFFSET)"""
    params = tuple(params or ())
    total = db.count_rows(query, params or None)

    def fetch(limit, offset):
        return db.execute_query(f"{query}\nLIMIT %s OFFSET %s", params + (limit, offset))

    return Paginator(fetch, total, page_size or get_page_size())


def render_page(title, columns, rows, to_row, caption=None):
    """
    Print one page as a Rich table.

    columns is a list of (header, column_kwargs) pairs; to_row turns a result
    row into the cell strings.
    """
    table = Table(title=title, caption=caption, show_header=True, header_style="bold magenta")
    for header, kwargs in columns:
        table.add_column(header, **kwargs)
    for row in rows:
        table.add_row(*to_row(row))
    console.print(table)


def browse(paginator, title, columns, to_row, empty_message="No records found"):
    """Show pages with n(ext)/p(revious)/q(uit) navigation"""
    if paginator.total_rows == 0:
        console.print(f"[yellow]{empty_message}[/yellow]")
        return

    index = 0
    while True:
        rows = paginator.page(index)
        first = paginator.offset(index) + 1
        caption = (f"Page {index + 1} of {paginator.pages}  "
                   f"(rows {first}-{first + len(rows) - 1} of {paginator.total_rows})")
        render_page(title, columns, rows, to_row, caption)

        if paginator.pages == 1:
            return

        choice = Prompt.ask("(n)ext, (p)revious, (q)uit", default="n", console=console).strip().lower()
        if choice == 'q':
            return
        elif choice == 'n':
            if index + 1 < paginator.pages:
                index += 1
            else:
                console.print("[yellow]Already on the last page[/yellow]")
        elif choice == 'p':
            if index > 0:
                index -= 1
            else:
                console.print("[yellow]Already on the first page[/yellow]")
        else:
            console.print("[yellow]Invalid option, please try again[/yellow]")
