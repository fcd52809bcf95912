"""
Connection helpers.
"""
import logging
from typing import Any

from dbtypes.exceptions import UnsupportedProviderError

logger = logging.getLogger(__name__)

# driver module fragment -> provider kind, checked in order
_DRIVER_MODULES = (
    ('psycopg', 'postgresql'),
    ('sqlite3', 'sqlite'),
    ('pyodbc', 'sqlserver'),
    ('pymssql', 'sqlserver'),
    ('pymysql', 'mysql'),
    ('mysqldb', 'mysql'),
    ('mysql.connector', 'mysql'),
    ('mariadb', 'mysql'),
    )

PROVIDER_ALIASES = {
    'postgres': 'postgresql',
    'psycopg': 'postgresql',
    'psycopg2': 'postgresql',
    'mssql': 'sqlserver',
    'pyodbc': 'sqlserver',
    'pymssql': 'sqlserver',
    'mariadb': 'mysql',
    'pymysql': 'mysql',
    'sqlite3': 'sqlite',
    }


def normalize_provider_name(provider: str) -> str:
    """Canonical provider kind for a provider name, dialect name or driver alias."""
    provider = provider.strip().lower()
    return PROVIDER_ALIASES.get(provider, provider)


def get_provider_kind(obj: Any) -> str:
    """Get provider kind for a database connection or engine.

    Args:
        obj: Provider name, connection object, engine, or wrapper

    Returns
        str: Provider kind ('postgresql', 'sqlserver', 'mysql' or 'sqlite')

    Raises
        UnsupportedProviderError: If the provider cannot be determined
    """
    if isinstance(obj, str):
        return normalize_provider_name(obj)

    # SQLAlchemy engine or connection with dialect
    if hasattr(obj, 'dialect'):
        dialect = obj.dialect
        if isinstance(dialect, str):
            return normalize_provider_name(dialect)
        return normalize_provider_name(str(dialect.name))

    # SQLAlchemy connection (has engine.dialect)
    if hasattr(obj, 'engine') and hasattr(obj.engine, 'dialect'):
        return normalize_provider_name(str(obj.engine.dialect.name))

    # SQLAlchemy pool wrapper - unwrap to DBAPI connection
    if hasattr(obj, 'dbapi_connection'):
        return get_provider_kind(obj.dbapi_connection)

    # Raw DBAPI connection - check type name
    type_name = f'{type(obj).__module__}.{type(obj).__name__}'.lower()
    for fragment, provider in _DRIVER_MODULES:
        if fragment in type_name:
            return provider

    raise UnsupportedProviderError(f'Cannot determine provider for {type(obj)}')
