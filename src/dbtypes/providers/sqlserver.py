"""
SQL Server type map.

See https://learn.microsoft.com/en-us/sql/t-sql/data-types/data-types-transact-sql
"""
import datetime
import decimal
import fractions
import logging
import uuid
import xml.etree.ElementTree as ElementTree
from dataclasses import replace

import numpy as np

from dbtypes import defaults, helpers
from dbtypes.converters import SqlToTypeConverter, TypeToSqlConverter
from dbtypes.providers.base import ProviderTypeMap, language_type, register_provider
from dbtypes.providers.mapping import ProviderTypeMapping

logger = logging.getLogger(__name__)


class SqlServerTypes:
    """SQL Server type names."""
    sql_bit = 'bit'
    sql_tinyint = 'tinyint'
    sql_smallint = 'smallint'
    sql_int = 'int'
    sql_bigint = 'bigint'
    sql_real = 'real'
    sql_float = 'float'
    sql_decimal = 'decimal'
    sql_numeric = 'numeric'
    sql_money = 'money'
    sql_smallmoney = 'smallmoney'
    sql_uniqueidentifier = 'uniqueidentifier'
    sql_char = 'char'
    sql_nchar = 'nchar'
    sql_varchar = 'varchar'
    sql_nvarchar = 'nvarchar'
    sql_text = 'text'
    sql_ntext = 'ntext'
    sql_xml = 'xml'
    sql_json = 'json'
    sql_smalldatetime = 'smalldatetime'
    sql_datetime = 'datetime'
    sql_datetime2 = 'datetime2'
    sql_datetimeoffset = 'datetimeoffset'
    sql_time = 'time'
    sql_date = 'date'
    sql_timestamp = 'timestamp'
    sql_rowversion = 'rowversion'
    sql_binary = 'binary'
    sql_varbinary = 'varbinary'
    sql_image = 'image'
    sql_variant = 'sql_variant'
    sql_geometry = 'geometry'
    sql_geography = 'geography'
    sql_hierarchyid = 'hierarchyid'


class SqlServerTypeMapping(ProviderTypeMapping):
    """SQL Server type names and composite type factories."""

    boolean_type = SqlServerTypes.sql_bit
    enum_string_type = SqlServerTypes.sql_varchar
    is_unicode_provider = False

    _numeric_type_map = {
        int: SqlServerTypes.sql_int,
        float: SqlServerTypes.sql_float,
        decimal.Decimal: SqlServerTypes.sql_decimal,
        fractions.Fraction: SqlServerTypes.sql_decimal,
        np.int8: SqlServerTypes.sql_tinyint,
        np.uint8: SqlServerTypes.sql_tinyint,
        np.int16: SqlServerTypes.sql_smallint,
        np.uint16: SqlServerTypes.sql_smallint,
        np.int32: SqlServerTypes.sql_int,
        np.uint32: SqlServerTypes.sql_int,
        np.int64: SqlServerTypes.sql_bigint,
        np.uint64: SqlServerTypes.sql_bigint,
        np.float16: SqlServerTypes.sql_real,
        np.float32: SqlServerTypes.sql_real,
        np.float64: SqlServerTypes.sql_float,
        }

    @property
    def numeric_type_map(self) -> dict[type, str]:
        return self._numeric_type_map

    def create_guid_type(self):
        return helpers.create_simple_type(SqlServerTypes.sql_uniqueidentifier)

    def create_object_type(self):
        return helpers.create_simple_type(SqlServerTypes.sql_variant)

    def create_text_type(self, descriptor):
        if descriptor.is_fixed_length:
            sql_type = SqlServerTypes.sql_nchar if descriptor.is_unicode else SqlServerTypes.sql_char
        else:
            sql_type = SqlServerTypes.sql_nvarchar if descriptor.is_unicode else SqlServerTypes.sql_varchar
        return helpers.create_string_type(sql_type, descriptor.length,
                                          bool(descriptor.is_unicode),
                                          bool(descriptor.is_fixed_length))

    def create_datetime_type(self, descriptor):
        kind = helpers.get_datetime_kind(descriptor.base_type)
        if kind == 'date':
            return helpers.create_simple_type(SqlServerTypes.sql_date)
        if kind in {'time', 'timedelta'}:
            return helpers.create_simple_type(SqlServerTypes.sql_time)
        return helpers.create_simple_type(SqlServerTypes.sql_datetime)

    def create_binary_type(self, descriptor):
        sql_type = SqlServerTypes.sql_binary if descriptor.is_fixed_length else SqlServerTypes.sql_varbinary
        return helpers.create_binary_type(sql_type, descriptor.length, bool(descriptor.is_fixed_length))

    def create_xml_type(self):
        return helpers.create_simple_type(SqlServerTypes.sql_xml)

    def create_json_type(self, descriptor):
        sql_type = 'nvarchar(max)' if descriptor.is_unicode else 'varchar(max)'
        return helpers.create_json_type(sql_type, is_text=True)


@register_provider('sqlserver')
class SqlServerProviderTypeMap(ProviderTypeMap):
    """SQL Server specific type mappings.
    """

    def create_provider_type_mapping(self):
        return SqlServerTypeMapping()

    def get_boolean_converter(self):

        def boolean_to_sql(d):
            return replace(helpers.create_simple_type(SqlServerTypes.sql_bit), length=1)

        return TypeToSqlConverter(boolean_to_sql)

    def create_geometry_type_for_name(self, name):
        if name in helpers.GENERIC_GEOMETRY_NAMES:
            return helpers.create_geometry_type(SqlServerTypes.sql_geometry)
        if name in helpers.GEOMETRY_TYPE_NAMES:
            # concrete shapes are stored as well-known text
            return helpers.create_lob_type('nvarchar(max)', is_unicode=True)
        return None

    def register_sql_type_converters(self):
        reg = self.registry
        t = SqlServerTypes

        reg.register_sql_converter(t.sql_bit, SqlToTypeConverter(self._bit_to_type))
        reg.register_sql_converters(
            SqlToTypeConverter(self._numeric_to_type),
            t.sql_tinyint, t.sql_smallint, t.sql_int, t.sql_bigint, t.sql_real,
            t.sql_float, t.sql_decimal, t.sql_numeric, t.sql_money, t.sql_smallmoney)
        reg.register_sql_converter(t.sql_uniqueidentifier,
                                   SqlToTypeConverter(lambda d: language_type(uuid.UUID, d), 'guid'))
        reg.register_sql_converters(
            SqlToTypeConverter(self._text_to_type),
            t.sql_nvarchar, t.sql_varchar, t.sql_ntext, t.sql_text, t.sql_nchar, t.sql_char)
        reg.register_sql_converter(t.sql_xml,
                                   SqlToTypeConverter(lambda d: language_type(ElementTree.Element, d), 'xml'))
        reg.register_sql_converter(t.sql_json,
                                   SqlToTypeConverter(lambda d: language_type(dict, d), 'json'))
        reg.register_sql_converters(
            SqlToTypeConverter(self._datetime_to_type),
            t.sql_smalldatetime, t.sql_datetime, t.sql_datetime2, t.sql_datetimeoffset,
            t.sql_time, t.sql_date, t.sql_timestamp, t.sql_rowversion)
        reg.register_sql_converters(
            SqlToTypeConverter(lambda d: language_type(bytes, d), 'binary'),
            t.sql_varbinary, t.sql_binary, t.sql_image)
        reg.register_sql_converter(t.sql_variant,
                                   SqlToTypeConverter(lambda d: language_type(object, d), 'object'))
        reg.register_sql_converters(
            SqlToTypeConverter(self._geometry_to_type),
            t.sql_geometry, t.sql_geography, t.sql_hierarchyid)

    @staticmethod
    def _bit_to_type(d):
        return language_type(bool, d, length=None)

    @staticmethod
    def _numeric_to_type(d):
        t = SqlServerTypes
        match d.base_type_name:
            case t.sql_tinyint:
                return language_type(np.uint8, d)
            case t.sql_smallint:
                return language_type(np.int16, d)
            case t.sql_int:
                return language_type(int, d)
            case t.sql_bigint:
                return language_type(np.int64, d)
            case t.sql_real:
                return language_type(np.float32, d)
            case t.sql_float:
                return language_type(float, d)
            case t.sql_decimal | t.sql_numeric:
                return language_type(
                    decimal.Decimal, d,
                    precision=d.precision or defaults.DEFAULT_DECIMAL_PRECISION,
                    scale=d.scale if d.scale is not None else defaults.DEFAULT_DECIMAL_SCALE)
            case t.sql_money:
                return language_type(decimal.Decimal, d,
                                     precision=d.precision or defaults.SQLSERVER_MONEY_PRECISION,
                                     scale=d.scale if d.scale is not None else defaults.SQLSERVER_MONEY_SCALE)
            case t.sql_smallmoney:
                return language_type(decimal.Decimal, d,
                                     precision=d.precision or defaults.SQLSERVER_SMALLMONEY_PRECISION,
                                     scale=d.scale if d.scale is not None else defaults.SQLSERVER_SMALLMONEY_SCALE)
        return language_type(int, d)

    @staticmethod
    def _text_to_type(d):
        name = d.base_type_name
        if 'text' in name or '(max)' in d.sql_type_name.lower():
            length = defaults.MAX_LENGTH
        else:
            length = d.length or defaults.DEFAULT_STRING_LENGTH
        return language_type(
            str, d,
            length=length,
            is_unicode=name.startswith('n'),
            is_fixed_length=name in {SqlServerTypes.sql_char, SqlServerTypes.sql_nchar})

    @staticmethod
    def _datetime_to_type(d):
        t = SqlServerTypes
        match d.base_type_name:
            case t.sql_date:
                return language_type(datetime.date, d)
            case t.sql_time:
                return language_type(datetime.time, d)
        return language_type(datetime.datetime, d)

    @staticmethod
    def _geometry_to_type(d):
        if d.base_type_name == SqlServerTypes.sql_hierarchyid:
            return language_type(object, d)
        return language_type(helpers.get_geometry_type('geometry'), d)
