"""
Unit tests for provider detection.
"""
import types

import pytest
from dbtypes.exceptions import UnsupportedProviderError
from dbtypes.providers import get_type_map
from dbtypes.utils import get_provider_kind


@pytest.mark.parametrize(('name', 'expected'), [
    ('postgresql', 'postgresql'),
    ('postgres', 'postgresql'),
    ('MSSQL', 'sqlserver'),
    ('mariadb', 'mysql'),
    ('sqlite3', 'sqlite'),
    (' sqlite ', 'sqlite'),
    ('psycopg', 'postgresql'),
    ('pyodbc', 'sqlserver'),
    ('pymysql', 'mysql'),
])
def test_provider_names(name, expected):
    assert get_provider_kind(name) == expected


@pytest.mark.parametrize(('connection_type', 'expected'), [
    ('postgresql', 'postgresql'),
    ('sqlite', 'sqlite'),
    ('sqlserver', 'sqlserver'),
    ('mysql', 'mysql'),
])
def test_dbapi_connections(create_simple_mock_connection, connection_type, expected):
    """Test raw driver connections are detected by their module"""
    conn = create_simple_mock_connection(connection_type)
    assert get_provider_kind(conn) == expected


def test_unknown_connection(create_simple_mock_connection):
    with pytest.raises(UnsupportedProviderError):
        get_provider_kind(create_simple_mock_connection('unknown'))
    with pytest.raises(UnsupportedProviderError):
        get_provider_kind(object())


def test_engine_and_connection(create_mock_engine):
    """Test SQLAlchemy-style engines and connections use the dialect name"""
    assert get_provider_kind(create_mock_engine('mssql')) == 'sqlserver'
    assert get_provider_kind(create_mock_engine('postgresql', wrap_connection=True)) == 'postgresql'


def test_pool_wrapper(create_simple_mock_connection):
    wrapper = types.SimpleNamespace(dbapi_connection=create_simple_mock_connection('sqlite'))
    assert get_provider_kind(wrapper) == 'sqlite'


def test_type_map_from_connection(create_simple_mock_connection, create_mock_engine):
    """Test connections share the type map of their provider"""
    conn = create_simple_mock_connection('postgresql')
    assert get_type_map(conn) is get_type_map('postgresql')
    assert get_type_map(create_mock_engine('mysql')) is get_type_map('mysql')
    assert get_type_map(conn).get_sql_type_name(bool) == 'boolean'
