"""Pagination over re-executed queries."""
from unittest.mock import patch

import pytest

from realty import paging
from realty.paging import Paginator, page_count, query_paginator


def list_paginator(rows, page_size):
    """Paginator backed by a list, recording each (limit, offset) fetch"""
    calls = []

    def fetch(limit, offset):
        calls.append((limit, offset))
        return rows[offset:offset + limit]

    return Paginator(fetch, len(rows), page_size), calls


@pytest.mark.parametrize("total,size,expected", [
    (0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 5, 5), (26, 5, 6),
])
def test_page_count(total, size, expected):
    assert page_count(total, size) == expected


def test_page_count_rejects_non_positive_size():
    with pytest.raises(ValueError):
        page_count(10, 0)


@pytest.mark.parametrize("total,size", [(0, 3), (1, 3), (7, 3), (9, 3), (23, 10), (5, 1)])
def test_pages_cover_every_row_once(total, size):
    rows = list(range(total))
    paginator, _ = list_paginator(rows, size)

    pages = list(paginator)

    assert len(pages) == page_count(total, size)
    for index, page in enumerate(pages):
        remaining = total - index * size
        assert len(page) == min(size, remaining)
    flattened = [row for page in pages for row in page]
    assert flattened == rows


def test_each_page_is_a_fresh_fetch():
    paginator, calls = list_paginator(list(range(12)), 5)
    paginator.page(2)
    paginator.page(0)
    assert calls == [(5, 10), (5, 0)]


def test_page_out_of_range():
    paginator, _ = list_paginator(list(range(4)), 2)
    with pytest.raises(IndexError):
        paginator.page(2)
    with pytest.raises(IndexError):
        paginator.page(-1)


def test_query_paginator_appends_limit_and_offset():
    with patch.object(paging, 'db') as fake_db:
        fake_db.count_rows.return_value = 7
        fake_db.execute_query.return_value = []

        paginator = query_paginator("SELECT * FROM lease WHERE status = %s", ['active'], page_size=3)
        paginator.page(2)

        fake_db.count_rows.assert_called_once_with("SELECT * FROM lease WHERE status = %s", ('active',))
        query, params = fake_db.execute_query.call_args[0]
        assert query.rstrip().endswith("LIMIT %s OFFSET %s")
        assert params == ('active', 3, 6)
    assert paginator.pages == 3


def test_query_paginator_without_params_counts_with_none():
    with patch.object(paging, 'db') as fake_db:
        fake_db.count_rows.return_value = 0
        query_paginator("SELECT * FROM owner", page_size=5)
        fake_db.count_rows.assert_called_once_with("SELECT * FROM owner", None)


def test_browse_navigates_next_previous_quit():
    paginator, calls = list_paginator(list(range(7)), 3)
    keys = iter(["n", "n", "n", "p", "q"])
    with patch.object(paging.Prompt, 'ask', side_effect=lambda *a, **k: next(keys)), \
            patch.object(paging, 'render_page') as render:
        paging.browse(paginator, "Rows", [("Value", {})], lambda r: (str(r),))

    # third 'n' stays on the last page
    assert [offset for _, offset in calls] == [0, 3, 6, 6, 3]
    assert render.call_count == 5


def test_browse_single_page_does_not_prompt():
    paginator, _ = list_paginator([1, 2], 5)
    with patch.object(paging.Prompt, 'ask') as ask, patch.object(paging, 'render_page'):
        paging.browse(paginator, "Rows", [("Value", {})], lambda r: (str(r),))
    ask.assert_not_called()


def test_browse_empty_result():
    paginator, calls = list_paginator([], 5)
    with patch.object(paging, 'render_page') as render:
        paging.browse(paginator, "Rows", [("Value", {})], lambda r: (str(r),))
    render.assert_not_called()
    assert calls == []
