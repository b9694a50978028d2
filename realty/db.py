"""
Database connection handler for Realty Manager

A single connection is opened at startup and shared by every menu action.
Each statement runs in its own cursor, which is closed as soon as the
statement has been executed.
"""
import logging
from contextlib import contextmanager
from importlib import resources

import psycopg2
from psycopg2.extras import RealDictCursor

from realty.config import get_db_params

logger = logging.getLogger(__name__)

_connection = None


def connect(**params):
    """Open the shared connection (parameters default to the environment)"""
    global _connection
    if _connection is not None and not _connection.closed:
        return _connection
    params = params or get_db_params()
    logger.info("Connecting to %s@%s/%s", params.get('user'), params.get('host'), params.get('database'))
    _connection = psycopg2.connect(**params)
    return _connection


def set_connection(conn):
    """Use an already open connection (tests, embedding)"""
    global _connection
    _connection = conn


def get_connection():
    """Get the shared connection, opening it on first use"""
    if _connection is None or _connection.closed:
        return connect()
    return _connection


def close():
    """Release the shared connection"""
    global _connection
    if _connection is not None and not _connection.closed:
        _connection.close()
        logger.info("Database connection closed")
    _connection = None


def execute_query(query, params=None):
    """Execute a SELECT and return the rows as dicts"""
    conn = get_connection()
    try:
        with conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(query, params)
            rows = cur.fetchall()
        conn.commit()
        return rows
    except psycopg2.Error:
        conn.rollback()
        raise


def execute_insert(query, params=None):
    """Execute an INSERT ... RETURNING and return the new row ID"""
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(query, params)
            new_id = cur.fetchone()[0] if cur.description else None
        conn.commit()
        logger.info("Inserted row %s", new_id)
        return new_id
    except psycopg2.Error:
        conn.rollback()
        logger.exception("Insert failed")
        raise


def execute_command(query, params=None):
    """Execute an UPDATE/DELETE and return the affected row count"""
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(query, params)
            count = cur.rowcount
        conn.commit()
        logger.info("Command affected %s row(s)", count)
        return count
    except psycopg2.Error:
        conn.rollback()
        logger.exception("Command failed")
        raise


@contextmanager
def transaction():
    """Yield a cursor whose statements commit together or not at all"""
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def count_rows(query, params=None):
    """Count the rows a SELECT would return without fetching them"""
    rows = execute_query(f"SELECT COUNT(*) AS total FROM ({query}) AS counted", params)
    return rows[0]['total']


def read_sql_script(name):
    """Read one of the bundled SQL scripts (schema.sql, seed.sql, drop.sql)"""
    return resources.files('realty').joinpath('sql', name).read_text(encoding='utf-8')


def run_script(name):
    """Execute a bundled SQL script as one transaction"""
    script = read_sql_script(name)
    with transaction() as cur:
        cur.execute(script)
    logger.info("Executed %s", name)
