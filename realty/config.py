"""
Runtime configuration for Realty Manager

Values come from the environment, with a .env file in the working
directory loaded first.
"""
import os
from dotenv import load_dotenv

from realty.errors import ConfigError

load_dotenv()

DEFAULT_PAGE_SIZE = 10
DEFAULT_DB_PORT = 5432


def get_db_params():
    """Connection parameters for psycopg2.connect"""
    return {
        'host': os.getenv('DB_HOST', 'localhost'),
        'port': get_db_port(),
        'database': os.getenv('DB_NAME'),
        'user': os.getenv('DB_USER'),
        'password': os.getenv('DB_PASSWORD'),
    }


def get_db_port():
    """DB_PORT as an integer; unset or blank means the PostgreSQL default"""
    raw = (os.getenv('DB_PORT') or '').strip()
    if not raw:
        return DEFAULT_DB_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ConfigError(f"DB_PORT must be a port number, got '{raw}'")
    if not 0 < port < 65536:
        raise ConfigError(f"DB_PORT must be between 1 and 65535, got {port}")
    return port


def get_page_size():
    """Rows per page for listings and reports"""
    try:
        size = int(os.getenv('REALTY_PAGE_SIZE', DEFAULT_PAGE_SIZE))
    except ValueError:
        return DEFAULT_PAGE_SIZE
    return size if size > 0 else DEFAULT_PAGE_SIZE


def get_log_level():
    return os.getenv('REALTY_LOG_LEVEL', 'WARNING').upper()


def get_log_file():
    return os.getenv('REALTY_LOG_FILE') or None
