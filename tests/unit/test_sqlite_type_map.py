"""
Tests for SQLite type mappings.
"""
import datetime
import decimal
import uuid
import xml.etree.ElementTree as ElementTree

import numpy as np
import pytest
from dbtypes import defaults
from tests.fixtures.type_maps import Color, Point3D


@pytest.mark.parametrize(('python_type', 'metadata', 'expected'), [
    (bool, {}, 'boolean'),
    (np.int8, {}, 'tinyint'),
    (np.int16, {}, 'smallint'),
    (int, {}, 'int'),
    (np.uint32, {}, 'int'),
    (np.int64, {}, 'bigint'),
    (np.float32, {}, 'real'),
    (float, {}, 'double'),
    (decimal.Decimal, {}, 'numeric(16,4)'),
    (uuid.UUID, {}, 'varchar(36)'),
    (str, {}, 'varchar(255)'),
    (str, {'is_unicode': True}, 'nvarchar(255)'),
    (str, {'length': 8, 'is_fixed_length': True}, 'char(8)'),
    (str, {'length': 8, 'is_fixed_length': True, 'is_unicode': True}, 'nchar(8)'),
    (str, {'length': defaults.MAX_LENGTH}, 'varchar'),
    (str, {'length': defaults.MAX_LENGTH, 'is_unicode': True}, 'nvarchar'),
    (ElementTree.Element, {}, 'text'),
    (dict, {}, 'text'),
    (tuple[int, ...], {}, 'text'),
    (Point3D, {}, 'text'),
    (Color, {}, 'varchar(128)'),
    (bytes, {}, 'blob'),
    (object, {}, 'clob'),
    (datetime.datetime, {}, 'datetime'),
    (datetime.date, {}, 'date'),
    (datetime.time, {}, 'time'),
    (datetime.timedelta, {}, 'time'),
])
def test_language_type_to_sql(sqlite_map, python_type, metadata, expected):
    """Test SQLite declared types for Python types"""
    result = sqlite_map.get_sql_type_name(python_type, **metadata)
    assert result == expected, f'Expected {expected} for {python_type}, got {result}'


def test_guid_is_not_fixed_length(sqlite_map):
    sql_type = sqlite_map.get_sql_type(uuid.UUID)
    assert sql_type.length == defaults.GUID_STRING_LENGTH
    assert not sql_type.is_fixed_length


def test_max_text_is_lob(sqlite_map):
    sql_type = sqlite_map.get_sql_type(str, length=defaults.MAX_LENGTH)
    assert sql_type.length == defaults.MAX_LENGTH


@pytest.mark.parametrize(('sql_type', 'expected'), [
    ('bool', bool),
    ('boolean', bool),
    ('tinyint', np.uint8),
    ('int2', np.int16),
    ('integer', int),
    ('mediumint', int),
    ('year', int),
    ('bigint', np.int64),
    ('unsigned big int', np.int64),
    ('real', np.float32),
    ('float', float),
    ('double precision', float),
    ('numeric(10,2)', decimal.Decimal),
    ('varchar(36)', uuid.UUID),
    ('char(36)', uuid.UUID),
    ('varchar(10)', str),
    ('varying character(20)', str),
    ('native character(10)', str),
    ('text', str),
    ('datetime', datetime.datetime),
    ('timestamp', datetime.datetime),
    ('date', datetime.date),
    ('time', datetime.time),
    ('blob', bytes),
    ('clob', object),
])
def test_sql_to_language_type(sqlite_map, sql_type, expected):
    """Test Python types for SQLite declared types"""
    found, result = sqlite_map.try_get_language_type(sql_type)
    assert found, f'{sql_type} should be recognised'
    assert result.base_type is expected, f'Expected {expected} for {sql_type}, got {result.base_type}'


def test_text_metadata(sqlite_map):
    """Test text lengths, unicode and fixed-length flags"""
    d = sqlite_map.get_language_type('varchar')
    assert (d.base_type, d.length) == (str, defaults.MAX_LENGTH)

    d = sqlite_map.get_language_type('native character(10)')
    assert (d.length, d.is_unicode, d.is_fixed_length) == (10, True, True)

    d = sqlite_map.get_language_type('char')
    assert d.length == defaults.DEFAULT_STRING_LENGTH


def test_decimal_defaults(sqlite_map):
    d = sqlite_map.get_language_type('decimal')
    assert (d.precision, d.scale) == (16, 4)

    d = sqlite_map.get_language_type('numeric(10,2)')
    assert (d.precision, d.scale) == (10, 2)


def test_unknown_declared_type(sqlite_map):
    assert sqlite_map.try_get_language_type('money') == (False, None)


def test_geometry_as_text(sqlite_map):
    """Test shapely classes are stored as well-known text"""
    pytest.importorskip('shapely')
    from shapely.geometry import Point

    assert sqlite_map.get_sql_type_name(Point) == 'text'
