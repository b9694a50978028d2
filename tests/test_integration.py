"""End-to-end checks against a real PostgreSQL schema (needs TEST_DB_NAME)."""
from datetime import date
from decimal import Decimal

import pytest

from realty import db
from realty.errors import DeleteBlocked, ValidationError
from realty.paging import query_paginator
from realty.commands import analytics_cmd, lease_cmd, maintenance_cmd, owner_cmd, ownership_cmd
from realty.commands import property_cmd, tenant_cmd


def table_count(table):
    return db.execute_query(f"SELECT COUNT(*) AS total FROM {table}")[0]["total"]


def test_property_round_trip(pg):
    property_id = property_cmd.insert_property(
        '12 Elm St', 'Urbana', 'IL', 'condo', Decimal('199999.99'), date(2023, 4, 5),
        zip_code='61801', bedrooms=2, bathrooms=Decimal('1.5'), square_feet=950, year_built=2001,
    )
    row = property_cmd.fetch_property(property_id)
    assert row['address'] == '12 Elm St'
    assert row['city'] == 'Urbana'
    assert row['state'] == 'IL'
    assert row['zip_code'] == '61801'
    assert row['property_type'] == 'condo'
    assert row['bedrooms'] == 2
    assert row['bathrooms'] == Decimal('1.5')
    assert row['square_feet'] == 950
    assert row['year_built'] == 2001
    assert row['purchase_price'] == Decimal('199999.99')
    assert row['purchase_date'] == date(2023, 4, 5)


def test_property_with_open_request_cannot_be_deleted(seeded):
    before = table_count('property')
    with pytest.raises(DeleteBlocked) as info:
        property_cmd.delete_property(5)
    assert "open maintenance request(s)" in info.value.dependents
    assert table_count('property') == before


def test_property_with_pending_lease_cannot_be_deleted(seeded):
    with pytest.raises(DeleteBlocked) as info:
        property_cmd.delete_property(4)
    assert info.value.dependents == {"active or pending lease(s)": 1}


def test_property_delete_removes_exactly_one_row(seeded):
    property_id = property_cmd.insert_property('3 Quiet Ln', 'Peoria', 'IL', 'single_family',
                                               Decimal('99000'), date(2024, 1, 1))
    ownership_cmd.insert_ownership(property_id, 1, '100')
    request_id = maintenance_cmd.insert_request(property_id, 'Paint fence', 'low', date(2024, 2, 1))
    maintenance_cmd.set_request_status(request_id, 'closed', date(2024, 2, 3))
    before = table_count('property')
    property_cmd.delete_property(property_id)
    assert table_count('property') == before - 1
    assert ownership_cmd.allocated_percentage(property_id) == 0


def test_owner_with_stakes_cannot_be_deleted(seeded):
    with pytest.raises(DeleteBlocked):
        owner_cmd.delete_owner(1)
    assert table_count('owner') == 4


def test_owner_without_stakes_is_deleted(seeded):
    owner_id = owner_cmd.insert_owner('Nadia', 'Ferris')
    owner_cmd.delete_owner(owner_id)
    assert table_count('owner') == 4


def test_tenant_with_active_lease_cannot_be_deleted(seeded):
    with pytest.raises(DeleteBlocked):
        tenant_cmd.delete_tenant(2)


def test_tenant_with_only_ended_leases_takes_history_along(seeded):
    # tenant 1 holds the expired lease 1 with three payments
    tenant_cmd.delete_tenant(1)
    assert table_count('tenant') == 4
    assert table_count('lease') == 4
    assert table_count('payment') == 7


def test_terminated_lease_can_be_deleted(seeded):
    lease_cmd.set_lease_status(2, 'terminated')
    lease_cmd.delete_lease(2)
    assert table_count('lease') == 4
    assert table_count('payment') == 7


def test_ownership_never_exceeds_100(seeded):
    with pytest.raises(ValidationError):
        ownership_cmd.insert_ownership(1, 2, '0.01')
    with pytest.raises(ValidationError):
        ownership_cmd.update_ownership(3, 4, '40.01')
    assert ownership_cmd.allocated_percentage(1) == Decimal('100')
    assert ownership_cmd.allocated_percentage(3) == Decimal('100')

    ownership_cmd.update_ownership(3, 4, '30')
    ownership_cmd.insert_ownership(3, 1, '10')
    assert ownership_cmd.allocated_percentage(3) == Decimal('100')


def test_paging_covers_every_row_once(seeded):
    query, params = lease_cmd.lease_list_query()
    paginator = query_paginator(query, params, page_size=2)
    assert paginator.pages == 3
    ids = [row['lease_id'] for page in paginator for row in page]
    assert sorted(ids) == [1, 2, 3, 4, 5]


def test_owner_valuation_matches_weighted_purchase_prices(seeded):
    rows = [row for page in analytics_cmd.OWNER_VALUATION.paginator(2) for row in page]
    expected = db.execute_query("""
        SELECT SUM(p.purchase_price * po.ownership_percentage / 100) AS total
        FROM property_owner po
        JOIN property p ON p.property_id = po.property_id
    """)[0]['total']
    assert sum(row['portfolio_value'] for row in rows) == expected
    # every property is fully allocated in the sample data
    assert expected == Decimal('1522500')


def test_maintenance_ranking_is_dense(seeded):
    rows = [row for page in analytics_cmd.MAINTENANCE_RANKING.paginator() for row in page]
    ranks = {row['property_id']: row['request_rank'] for row in rows}
    assert ranks == {2: 1, 3: 1, 1: 2, 5: 2}


def test_running_totals_never_decrease(seeded):
    rows = [row for page in analytics_cmd.RUNNING_PAYMENTS.paginator(3) for row in page]
    assert len(rows) == 10
    last = {}
    for row in rows:
        previous = last.get(row['tenant_id'], Decimal('0'))
        assert row['running_total'] >= previous
        last[row['tenant_id']] = row['running_total']
    assert last[1] == Decimal('4950.00')


def test_rent_yield_uses_active_leases(seeded):
    rows = {row['property_id']: row for row in analytics_cmd.RENT_YIELD.paginator().page(0)}
    assert rows[1]['annual_rent'] == Decimal('20700.00')
    assert rows[1]['rent_yield_pct'] == Decimal('11.19')
    # only a pending lease on property 4
    assert rows[4]['rent_yield_pct'] == 0


def test_oldest_requests_lists_open_only(seeded):
    rows = analytics_cmd.OLDEST_OPEN_REQUESTS.paginator().page(0)
    assert len(rows) == 6
    assert rows[0]['description'] == 'Cracked driveway'
    dates = [row['opened_date'] for row in rows]
    assert dates == sorted(dates)
