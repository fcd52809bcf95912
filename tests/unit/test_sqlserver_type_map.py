"""
Tests for SQL Server type mappings.
"""
import datetime
import decimal
import enum
import fractions
import types
import uuid
import xml.etree.ElementTree as ElementTree

import numpy as np
import pytest
from dbtypes import defaults
from psycopg.types.json import Json


class Status(enum.Enum):
    ACTIVE = 'active'


class Customer:
    pass


@pytest.mark.parametrize(('python_type', 'metadata', 'expected'), [
    (bool, {}, 'bit'),
    (np.bool_, {}, 'bit'),
    (np.uint8, {}, 'tinyint'),
    (np.int8, {}, 'tinyint'),
    (np.int16, {}, 'smallint'),
    (int, {}, 'int'),
    (np.int32, {}, 'int'),
    (np.int64, {}, 'bigint'),
    (np.float32, {}, 'real'),
    (float, {}, 'float'),
    (decimal.Decimal, {}, 'decimal(16,4)'),
    (decimal.Decimal, {'precision': 10, 'scale': 2}, 'decimal(10,2)'),
    (uuid.UUID, {}, 'uniqueidentifier'),
    (str, {}, 'varchar(255)'),
    (str, {'is_unicode': True}, 'nvarchar(255)'),
    (str, {'length': 50, 'is_unicode': True, 'is_fixed_length': True}, 'nchar(50)'),
    (str, {'length': 10, 'is_fixed_length': True}, 'char(10)'),
    (str, {'length': defaults.MAX_LENGTH}, 'varchar(max)'),
    (str, {'length': defaults.MAX_LENGTH, 'is_unicode': True}, 'nvarchar(max)'),
    (ElementTree.Element, {}, 'xml'),
    (Json, {}, 'varchar(max)'),
    (dict, {}, 'varchar(max)'),
    (dict, {'is_unicode': True}, 'nvarchar(max)'),
    (list[int], {}, 'varchar(max)'),
    (datetime.datetime, {}, 'datetime'),
    (datetime.date, {}, 'date'),
    (datetime.time, {}, 'time'),
    (datetime.timedelta, {}, 'time'),
    (bytes, {}, 'varbinary'),
    (bytes, {'length': 16, 'is_fixed_length': True}, 'binary(16)'),
    (bytes, {'length': 100}, 'varbinary(100)'),
    (object, {}, 'sql_variant'),
    (Status, {}, 'varchar(128)'),
    (tuple[int, ...], {}, 'varchar(max)'),
    (Customer, {}, 'varchar(max)'),
])
def test_language_type_to_sql(sqlserver_map, python_type, metadata, expected):
    """Test SQL Server SQL types for Python types"""
    result = sqlserver_map.get_sql_type_name(python_type, **metadata)
    assert result == expected, f'Expected {expected} for {python_type}, got {result}'


def test_boolean_has_length_one(sqlserver_map):
    assert sqlserver_map.get_sql_type(bool).length == 1


def test_unicode_strings_option(make_type_map):
    """Test unicode_strings applies to text descriptors that leave the flag unset"""
    type_map = make_type_map('sqlserver', unicode_strings=True)
    assert type_map.get_sql_type_name(str) == 'nvarchar(255)'
    assert type_map.get_sql_type_name(str, is_unicode=False) == 'varchar(255)'


def test_numeric_fallback(make_type_map, caplog):
    """Test unmapped numerics fall back to int leniently and fail strictly"""
    lenient = make_type_map('sqlserver')
    lenient.register_converter(complex, lenient.get_numeric_converter())
    with caplog.at_level('WARNING', logger='dbtypes.providers.base'):
        assert lenient.get_sql_type_name(complex) == 'int'
    assert 'no numeric mapping' in caplog.text

    strict = make_type_map('sqlserver', strict_numeric=True)
    strict.register_converter(complex, strict.get_numeric_converter())
    assert strict.try_get_sql_type(complex) == (False, None)


def test_fraction_is_decimal(sqlserver_map):
    assert sqlserver_map.get_sql_type_name(fractions.Fraction) == 'decimal(16,4)'
    assert sqlserver_map.get_sql_type_name(fractions.Fraction, precision=10, scale=2) == \
        'decimal(10,2)'


def test_reverse_lookup_does_not_warn(make_type_map, caplog):
    """Test resolving SQL types never hits the numeric fallback"""
    type_map = make_type_map('sqlserver')
    with caplog.at_level('WARNING', logger='dbtypes.providers.base'):
        assert type_map.get_language_type('int').base_type is int
        assert type_map.get_language_type('decimal(10,2)').base_type is decimal.Decimal
    assert 'no numeric mapping' not in caplog.text


@pytest.mark.parametrize(('sql_type', 'expected'), [
    ('bit', bool),
    ('tinyint', np.uint8),
    ('smallint', np.int16),
    ('int', int),
    ('bigint', np.int64),
    ('real', np.float32),
    ('float', float),
    ('uniqueidentifier', uuid.UUID),
    ('xml', ElementTree.Element),
    ('json', dict),
    ('datetime2(7)', datetime.datetime),
    ('smalldatetime', datetime.datetime),
    ('datetimeoffset', datetime.datetime),
    ('rowversion', datetime.datetime),
    ('date', datetime.date),
    ('time', datetime.time),
    ('varbinary(max)', bytes),
    ('image', bytes),
    ('sql_variant', object),
    ('hierarchyid', object),
])
def test_sql_to_language_type(sqlserver_map, sql_type, expected):
    """Test Python types for SQL Server SQL types"""
    found, result = sqlserver_map.try_get_language_type(sql_type)
    assert found, f'{sql_type} should be recognised'
    assert result.base_type is expected, f'Expected {expected} for {sql_type}, got {result.base_type}'


def test_text_metadata(sqlserver_map):
    """Test length, unicode and fixed-length flags come from the type name"""
    d = sqlserver_map.get_language_type('nvarchar(50)')
    assert (d.base_type, d.length, d.is_unicode, d.is_fixed_length) == (str, 50, True, False)

    d = sqlserver_map.get_language_type('nchar(10)')
    assert (d.length, d.is_unicode, d.is_fixed_length) == (10, True, True)

    d = sqlserver_map.get_language_type('varchar')
    assert d.length == defaults.DEFAULT_STRING_LENGTH

    d = sqlserver_map.get_language_type('varchar(max)')
    assert d.length == defaults.MAX_LENGTH
    assert sqlserver_map.get_sql_type_name(d) == 'varchar(max)'

    d = sqlserver_map.get_language_type('ntext')
    assert (d.length, d.is_unicode) == (defaults.MAX_LENGTH, True)


def test_decimal_and_money_defaults(sqlserver_map):
    """Test decimal defaults to 16/4 and money types carry their implied sizes"""
    d = sqlserver_map.get_language_type('decimal')
    assert (d.precision, d.scale) == (16, 4)

    d = sqlserver_map.get_language_type('numeric(10,2)')
    assert (d.base_type, d.precision, d.scale) == (decimal.Decimal, 10, 2)

    d = sqlserver_map.get_language_type('money')
    assert (d.precision, d.scale) == (19, 4)

    d = sqlserver_map.get_language_type('smallmoney')
    assert (d.precision, d.scale) == (10, 4)


def test_compatible_types(sqlserver_map):
    """Test reverse results list the other Python types with the same SQL type"""
    d = sqlserver_map.get_language_type('int')
    assert d.base_type is int
    assert np.int32 in d.compatible_types
    assert np.uint32 in d.compatible_types
    assert int not in d.compatible_types

    d = sqlserver_map.get_language_type('varchar(max)')
    assert dict in d.compatible_types, 'JSON-emulating types should be compatible with varchar'


def test_unknown_and_unsupported(sqlserver_map):
    """Test unknown SQL types and unstorable Python types report not found"""
    assert sqlserver_map.try_get_language_type('cursor') == (False, None)
    assert sqlserver_map.try_get_sql_type(types.FunctionType) == (False, None)


def test_geometry_mappings(sqlserver_map):
    """Test shapely types map to geometry or well-known text"""
    pytest.importorskip('shapely')
    from shapely.geometry import Point
    from shapely.geometry.base import BaseGeometry

    assert sqlserver_map.get_sql_type_name(BaseGeometry) == 'geometry'
    sql_type = sqlserver_map.get_sql_type(Point)
    assert sql_type.sql_type_name == 'nvarchar(max)'
    assert sql_type.is_unicode is True
    assert sqlserver_map.get_language_type('geography').base_type is BaseGeometry
