"""
Test fixtures for Realty Manager.

Unit tests patch the data-access functions and never open a connection.
Integration tests need a PostgreSQL database named by TEST_DB_NAME (other
connection settings come from the usual DB_* variables); each test gets a
throwaway schema that is dropped afterwards.
"""
import os
import uuid

import psycopg2
import pytest

from realty import db
from realty.config import get_db_params


@pytest.fixture
def pg():
    """Open connection with the schema loaded into a private search_path"""
    name = os.getenv('TEST_DB_NAME')
    if not name:
        pytest.skip("TEST_DB_NAME not set; skipping PostgreSQL integration tests")

    params = get_db_params()
    params['database'] = name
    conn = psycopg2.connect(**params)
    schema = f"realty_test_{uuid.uuid4().hex[:10]}"
    with conn.cursor() as cur:
        cur.execute(f"CREATE SCHEMA {schema}")
        cur.execute(f"SET search_path TO {schema}")
    conn.commit()

    db.set_connection(conn)
    db.run_script('schema.sql')
    try:
        yield conn
    finally:
        conn.rollback()
        with conn.cursor() as cur:
            cur.execute(f"DROP SCHEMA {schema} CASCADE")
        conn.commit()
        db.set_connection(None)
        conn.close()


@pytest.fixture
def seeded(pg):
    """Schema plus the bundled sample data"""
    db.run_script('seed.sql')
    return pg
