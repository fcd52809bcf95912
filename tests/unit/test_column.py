import datetime
import decimal
import types
import uuid

import numpy as np
from dbtypes import defaults
from dbtypes.column import Column
from tests.fixtures.type_maps import Color, Point3D


def test_column_get_names():
    """Test getting column names from a list of Columns"""
    columns = [
        Column('id', int),
        Column('name', str),
        Column('active', bool)
    ]

    names = Column.get_names(columns)
    assert names == ['id', 'name', 'active']


def test_column_get_column_by_name():
    """Test finding a column by name"""
    columns = [
        Column('id', int),
        Column('name', str),
        Column('active', bool)
    ]

    col = Column.get_column_by_name(columns, 'name')
    assert col is not None
    assert col.name == 'name'
    assert col.language_type is str

    # Column not found
    col = Column.get_column_by_name(columns, 'nonexistent')
    assert col is None


def test_column_get_column_types_dict():
    """Test getting column types dictionary"""
    columns = [
        Column('id', int, is_primary_key=True),
        Column('price', decimal.Decimal, precision=10, scale=2),
    ]

    types_dict = Column.get_column_types_dict(columns)
    assert set(types_dict) == {'id', 'price'}
    assert types_dict['id']['language_type'] == 'int'
    assert types_dict['id']['is_primary_key'] is True
    assert types_dict['price']['precision'] == 10
    assert types_dict['price']['scale'] == 2


def test_provider_data_types():
    """Test per-provider SQL types are stored under canonical provider names"""
    column = Column('id', int).set_provider_data_type('mssql', 'int')
    assert column.get_provider_data_type('sqlserver') == 'int'
    assert column.get_provider_data_type('postgresql') is None

    column = Column('id', int, provider_data_types={'postgres': 'integer'})
    assert column.provider_data_types == {'postgresql': 'integer'}


def test_resolve_provider_data_types():
    """Test one column resolves to each provider's SQL type"""
    column = Column('id', int).resolve_provider_data_types('sqlserver', 'postgresql', 'mysql', 'sqlite')
    assert column.provider_data_types == {
        'sqlserver': 'int',
        'postgresql': 'integer',
        'mysql': 'int',
        'sqlite': 'int',
    }

    column = Column('title', str, length=80, is_unicode=True).resolve_provider_data_types('sqlserver')
    assert column.get_provider_data_type('sqlserver') == 'nvarchar(80)'


def test_auto_increment_resolution():
    column = Column('id', int, is_primary_key=True, is_auto_increment=True)
    column.resolve_provider_data_types('postgresql')
    assert column.get_provider_data_type('postgresql') == 'serial'


def test_unsupported_type_is_skipped():
    column = Column('callback', types.FunctionType).resolve_provider_data_types('sqlite')
    assert column.provider_data_types == {}


def test_untyped_column_resolves_as_object():
    column = Column('payload').resolve_provider_data_types('sqlserver', 'postgresql')
    assert column.provider_data_types == {'sqlserver': 'sql_variant', 'postgresql': 'jsonb'}


def test_type_categories():
    """Test category predicates, most specific first"""
    expected = {
        bool: 'boolean',
        np.bool_: 'boolean',
        Color: 'enum',
        int: 'numeric',
        np.int64: 'numeric',
        decimal.Decimal: 'numeric',
        uuid.UUID: 'guid',
        str: 'text',
        datetime.datetime: 'datetime',
        datetime.timedelta: 'datetime',
        bytes: 'binary',
        tuple[int, ...]: 'array',
        dict[str, int]: 'dictionary',
        set[str]: 'enumerable',
        Point3D: 'object',
        None: 'object',
    }
    for language_type, category in expected.items():
        result = Column('c', language_type).get_type_category()
        assert result == category, f'Expected {category} for {language_type}, got {result}'


def test_from_sql_type():
    """Test columns built from introspected type strings"""
    column = Column.from_sql_type('title', 'nvarchar(100)', 'sqlserver', nullable=False)
    assert column.language_type is str
    assert column.length == 100
    assert column.is_unicode is True
    assert column.nullable is False
    assert column.get_provider_data_type('sqlserver') == 'nvarchar(100)'

    column = Column.from_sql_type('id', 'serial', 'postgresql')
    assert column.language_type is int
    assert column.is_auto_increment is True


def test_from_unknown_sql_type():
    column = Column.from_sql_type('c', 'cursor', 'sqlserver')
    assert column.language_type is None
    assert column.get_provider_data_type('sqlserver') == 'cursor'


def test_from_sequence_cursor_description():
    """Test DB-API tuples as returned by sqlite3 and pyodbc"""
    column = Column.from_cursor_description(('id', 'INTEGER', None, None, None, None, None), 'sqlite')
    assert column.name == 'id'
    assert column.language_type is int

    column = Column.from_cursor_description(('name', 'varchar(50)', 20, None, None, None, 1), 'mysql')
    assert column.language_type is str
    assert column.length == 20, 'display size should override the declared length'
    assert column.nullable is True

    column = Column.from_cursor_description(('amount', 'decimal', None, None, 12, 3), 'sqlserver')
    assert column.language_type is decimal.Decimal
    assert (column.precision, column.scale) == (12, 3)


def test_from_named_cursor_description():
    """Test psycopg column descriptions with numeric type oids"""
    description = types.SimpleNamespace(name='price', type_code=1700, display_size=None,
                                        precision=10, scale=2)
    column = Column.from_cursor_description(description, 'postgresql')
    assert column.language_type is decimal.Decimal
    assert (column.precision, column.scale) == (10, 2)

    description = types.SimpleNamespace(name='tags', type_code=1009, display_size=None,
                                        precision=None, scale=None)
    column = Column.from_cursor_description(description, 'postgres')
    assert column.language_type == tuple[str, ...]
    assert column.length == defaults.MAX_LENGTH


def test_unknown_type_code():
    description = types.SimpleNamespace(name='c', type_code=999999, display_size=None,
                                        precision=None, scale=None)
    column = Column.from_cursor_description(description, 'postgresql')
    assert column.language_type is None
    assert column.provider_data_types == {}


def test_repr_and_to_dict():
    column = Column('id', tuple[int, ...], provider_data_types={'postgresql': 'integer[]'})
    assert repr(column) == ("Column(name='id', language_type=tuple[int, ...], "
                            "provider_data_types={'postgresql': 'integer[]'})")
    assert column.to_dict()['language_type'] == 'tuple[int, ...]'
