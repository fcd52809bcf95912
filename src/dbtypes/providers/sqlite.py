"""
SQLite type map.

SQLite stores values by type affinity; the declared names below are the
ones DDL generation emits and the ones introspection is likely to meet.

See https://www.sqlite.org/datatype3.html
"""
import datetime
import decimal
import fractions
import logging
import uuid

import numpy as np

from dbtypes import defaults, helpers
from dbtypes.converters import SqlToTypeConverter
from dbtypes.providers.base import ProviderTypeMap, language_type, register_provider
from dbtypes.providers.mapping import ProviderTypeMapping

logger = logging.getLogger(__name__)


class SqliteTypes:
    """SQLite declared type names."""
    sql_boolean = 'boolean'
    sql_tinyint = 'tinyint'
    sql_smallint = 'smallint'
    sql_int = 'int'
    sql_bigint = 'bigint'
    sql_real = 'real'
    sql_double = 'double'
    sql_numeric = 'numeric'
    sql_char = 'char'
    sql_nchar = 'nchar'
    sql_varchar = 'varchar'
    sql_nvarchar = 'nvarchar'
    sql_text = 'text'
    sql_datetime = 'datetime'
    sql_date = 'date'
    sql_time = 'time'
    sql_blob = 'blob'
    sql_clob = 'clob'


TEXT_NAMES = ('character', 'char', 'varchar', 'varying character', 'nchar', 'native character',
              'nvarchar', 'text', 'ntext')
FIXED_TEXT_NAMES = frozenset(('character', 'char', 'nchar', 'native character'))


class SqliteTypeMapping(ProviderTypeMapping):
    """SQLite type names and composite type factories."""

    boolean_type = SqliteTypes.sql_boolean
    enum_string_type = SqliteTypes.sql_varchar
    is_unicode_provider = False

    _numeric_type_map = {
        int: SqliteTypes.sql_int,
        float: SqliteTypes.sql_double,
        decimal.Decimal: SqliteTypes.sql_numeric,
        fractions.Fraction: SqliteTypes.sql_numeric,
        np.int8: SqliteTypes.sql_tinyint,
        np.uint8: SqliteTypes.sql_tinyint,
        np.int16: SqliteTypes.sql_smallint,
        np.uint16: SqliteTypes.sql_smallint,
        np.int32: SqliteTypes.sql_int,
        np.uint32: SqliteTypes.sql_int,
        np.int64: SqliteTypes.sql_bigint,
        np.uint64: SqliteTypes.sql_bigint,
        np.float16: SqliteTypes.sql_real,
        np.float32: SqliteTypes.sql_real,
        np.float64: SqliteTypes.sql_double,
        }

    @property
    def numeric_type_map(self) -> dict[type, str]:
        return self._numeric_type_map

    def create_guid_type(self):
        return helpers.create_guid_string_type(SqliteTypes.sql_varchar, is_fixed_length=False)

    def create_object_type(self):
        return helpers.create_lob_type(SqliteTypes.sql_clob)

    def create_text_type(self, descriptor):
        is_unicode = bool(descriptor.is_unicode)
        if descriptor.length == defaults.MAX_LENGTH:
            sql_type = SqliteTypes.sql_nvarchar if is_unicode else SqliteTypes.sql_varchar
            return helpers.create_lob_type(sql_type, is_unicode)
        if descriptor.is_fixed_length:
            sql_type = SqliteTypes.sql_nchar if is_unicode else SqliteTypes.sql_char
        else:
            sql_type = SqliteTypes.sql_nvarchar if is_unicode else SqliteTypes.sql_varchar
        return helpers.create_string_type(sql_type, descriptor.length, is_unicode,
                                          bool(descriptor.is_fixed_length))

    def create_datetime_type(self, descriptor):
        match helpers.get_datetime_kind(descriptor.base_type):
            case 'date':
                return helpers.create_simple_type(SqliteTypes.sql_date)
            case 'time' | 'timedelta':
                return helpers.create_simple_type(SqliteTypes.sql_time)
        return helpers.create_simple_type(SqliteTypes.sql_datetime)

    def create_binary_type(self, descriptor):
        return helpers.create_binary_type(SqliteTypes.sql_blob)

    def create_xml_type(self):
        return helpers.create_lob_type(SqliteTypes.sql_text)

    def create_json_type(self, descriptor):
        return helpers.create_json_type(SqliteTypes.sql_text, is_text=True)


@register_provider('sqlite')
class SqliteProviderTypeMap(ProviderTypeMap):
    """SQLite specific type mappings.
    """

    def create_provider_type_mapping(self):
        return SqliteTypeMapping()

    def create_geometry_type_for_name(self, name):
        if name in helpers.GENERIC_GEOMETRY_NAMES or name in helpers.GEOMETRY_TYPE_NAMES:
            # stored as well-known text
            return helpers.create_lob_type(SqliteTypes.sql_text)
        return None

    def register_sql_type_converters(self):
        reg = self.registry

        reg.register_sql_converters(SqlToTypeConverter(lambda d: language_type(bool, d), 'boolean'),
                                    'bool', 'boolean')
        reg.register_sql_converter('tinyint', SqlToTypeConverter(lambda d: language_type(np.uint8, d)))
        reg.register_sql_converters(SqlToTypeConverter(lambda d: language_type(np.int16, d)),
                                    'smallint', 'int2')
        reg.register_sql_converters(SqlToTypeConverter(lambda d: language_type(int, d)),
                                    'int', 'int4', 'integer', 'mediumint', 'year')
        reg.register_sql_converters(SqlToTypeConverter(lambda d: language_type(np.int64, d)),
                                    'bigint', 'int8', 'unsigned big int')
        reg.register_sql_converter('real', SqlToTypeConverter(lambda d: language_type(np.float32, d)))
        reg.register_sql_converters(SqlToTypeConverter(lambda d: language_type(float, d)),
                                    'float', 'double', 'double precision')
        reg.register_sql_converters(SqlToTypeConverter(self._decimal_to_type), 'decimal', 'numeric')

        # varchar(36) columns hold uuids; checked before the generic text converter
        reg.register_sql_converters(SqlToTypeConverter(self._guid_to_type, 'guid'), 'char', 'varchar')
        reg.register_sql_converters(SqlToTypeConverter(self._text_to_type), *TEXT_NAMES)

        reg.register_sql_converters(
            SqlToTypeConverter(lambda d: language_type(datetime.datetime, d)), 'datetime', 'timestamp')
        reg.register_sql_converter('date', SqlToTypeConverter(lambda d: language_type(datetime.date, d)))
        reg.register_sql_converter('time', SqlToTypeConverter(lambda d: language_type(datetime.time, d)))
        reg.register_sql_converters(SqlToTypeConverter(lambda d: language_type(bytes, d), 'binary'),
                                    'blob', 'binary', 'varbinary')
        reg.register_sql_converter('clob', SqlToTypeConverter(lambda d: language_type(object, d), 'object'))

    @staticmethod
    def _decimal_to_type(d):
        return language_type(
            decimal.Decimal, d,
            precision=d.precision or defaults.DEFAULT_DECIMAL_PRECISION,
            scale=d.scale if d.scale is not None else defaults.DEFAULT_DECIMAL_SCALE)

    @staticmethod
    def _guid_to_type(d):
        if d.length != defaults.GUID_STRING_LENGTH:
            return None
        return language_type(uuid.UUID, d, length=None, is_fixed_length=None)

    @staticmethod
    def _text_to_type(d):
        name = d.base_type_name
        if name in {'text', 'ntext'} or (d.length is None and name in {'varchar', 'nvarchar'}):
            length = defaults.MAX_LENGTH
        else:
            length = d.length or defaults.DEFAULT_STRING_LENGTH
        return language_type(str, d, length=length,
                             is_unicode=name.startswith('n'),
                             is_fixed_length=name in FIXED_TEXT_NAMES)
