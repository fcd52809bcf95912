"""
MySQL / MariaDB type map.

See https://dev.mysql.com/doc/refman/8.0/en/data-types.html
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

DEFAULT_FRACTIONAL_SECONDS = 6


class MySqlTypes:
    """MySQL type names."""
    sql_bool = 'bool'
    sql_boolean = 'boolean'
    sql_bit = 'bit'
    sql_tinyint = 'tinyint'
    sql_tinyint_unsigned = 'tinyint unsigned'
    sql_smallint = 'smallint'
    sql_smallint_unsigned = 'smallint unsigned'
    sql_mediumint = 'mediumint'
    sql_mediumint_unsigned = 'mediumint unsigned'
    sql_int = 'int'
    sql_int_unsigned = 'int unsigned'
    sql_integer = 'integer'
    sql_integer_unsigned = 'integer unsigned'
    sql_serial = 'serial'
    sql_bigint = 'bigint'
    sql_bigint_unsigned = 'bigint unsigned'
    sql_decimal = 'decimal'
    sql_dec = 'dec'
    sql_fixed = 'fixed'
    sql_numeric = 'numeric'
    sql_decimal_unsigned = 'decimal unsigned'
    sql_dec_unsigned = 'dec unsigned'
    sql_fixed_unsigned = 'fixed unsigned'
    sql_numeric_unsigned = 'numeric unsigned'
    sql_float = 'float'
    sql_float_unsigned = 'float unsigned'
    sql_real = 'real'
    sql_real_unsigned = 'real unsigned'
    sql_double = 'double'
    sql_double_unsigned = 'double unsigned'
    sql_double_precision = 'double precision'
    sql_double_precision_unsigned = 'double precision unsigned'
    sql_datetime = 'datetime'
    sql_timestamp = 'timestamp'
    sql_time = 'time'
    sql_date = 'date'
    sql_year = 'year'
    sql_char = 'char'
    sql_varchar = 'varchar'
    sql_tinytext = 'tinytext'
    sql_text = 'text'
    sql_mediumtext = 'mediumtext'
    sql_longtext = 'longtext'
    sql_long_varchar = 'long varchar'
    sql_enum = 'enum'
    sql_set = 'set'
    sql_json = 'json'
    sql_binary = 'binary'
    sql_varbinary = 'varbinary'
    sql_tinyblob = 'tinyblob'
    sql_blob = 'blob'
    sql_mediumblob = 'mediumblob'
    sql_longblob = 'longblob'
    sql_long_varbinary = 'long varbinary'
    sql_geometry = 'geometry'
    sql_point = 'point'
    sql_linestring = 'linestring'
    sql_polygon = 'polygon'
    sql_multipoint = 'multipoint'
    sql_multilinestring = 'multilinestring'
    sql_multipolygon = 'multipolygon'
    sql_geometrycollection = 'geometrycollection'
    sql_geomcollection = 'geomcollection'


GEOMETRY_SQL_TYPES = (
    MySqlTypes.sql_geometry,
    MySqlTypes.sql_point,
    MySqlTypes.sql_linestring,
    MySqlTypes.sql_polygon,
    MySqlTypes.sql_multipoint,
    MySqlTypes.sql_multilinestring,
    MySqlTypes.sql_multipolygon,
    MySqlTypes.sql_geometrycollection,
    MySqlTypes.sql_geomcollection,
    )

_BIT_WIDTH_TYPES = {8: np.uint8, 16: np.int16, 32: np.int32, 64: np.int64}


class MySqlTypeMapping(ProviderTypeMapping):
    """MySQL type names and composite type factories."""

    boolean_type = 'tinyint(1)'
    enum_string_type = MySqlTypes.sql_varchar
    is_unicode_provider = True

    _numeric_type_map = {
        int: MySqlTypes.sql_int,
        float: MySqlTypes.sql_double,
        decimal.Decimal: MySqlTypes.sql_decimal,
        fractions.Fraction: MySqlTypes.sql_decimal,
        np.int8: MySqlTypes.sql_tinyint,
        np.uint8: MySqlTypes.sql_tinyint_unsigned,
        np.int16: MySqlTypes.sql_smallint,
        np.uint16: MySqlTypes.sql_smallint_unsigned,
        np.int32: MySqlTypes.sql_int,
        np.uint32: MySqlTypes.sql_int_unsigned,
        np.int64: MySqlTypes.sql_bigint,
        np.uint64: MySqlTypes.sql_bigint_unsigned,
        np.float16: MySqlTypes.sql_float,
        np.float32: MySqlTypes.sql_float,
        np.float64: MySqlTypes.sql_double,
        }

    @property
    def numeric_type_map(self) -> dict[type, str]:
        return self._numeric_type_map

    def create_guid_type(self):
        return helpers.create_guid_string_type(MySqlTypes.sql_char)

    def create_object_type(self):
        return helpers.create_json_type(MySqlTypes.sql_json)

    def create_text_type(self, descriptor):
        if descriptor.length == defaults.MAX_LENGTH:
            return helpers.create_lob_type(MySqlTypes.sql_text, bool(descriptor.is_unicode))
        sql_type = MySqlTypes.sql_char if descriptor.is_fixed_length else MySqlTypes.sql_varchar
        return helpers.create_string_type(sql_type, descriptor.length,
                                          bool(descriptor.is_unicode),
                                          bool(descriptor.is_fixed_length))

    def create_datetime_type(self, descriptor):
        kind = helpers.get_datetime_kind(descriptor.base_type)
        if kind == 'date':
            return helpers.create_simple_type(MySqlTypes.sql_date)
        if descriptor.length is not None:
            precision = descriptor.length
        elif descriptor.precision is not None:
            precision = descriptor.precision
        else:
            precision = DEFAULT_FRACTIONAL_SECONDS
        if kind in {'time', 'timedelta'}:
            return helpers.create_datetime_type(MySqlTypes.sql_time, precision)
        return helpers.create_datetime_type(MySqlTypes.sql_datetime, precision)

    def create_binary_type(self, descriptor):
        length = descriptor.length
        if length is not None and length > 0:
            sql_type = MySqlTypes.sql_binary if descriptor.is_fixed_length else MySqlTypes.sql_varbinary
            return helpers.create_binary_type(sql_type, length, bool(descriptor.is_fixed_length))
        return helpers.create_binary_type(MySqlTypes.sql_blob)

    def create_xml_type(self):
        return helpers.create_lob_type(MySqlTypes.sql_text)

    def create_json_type(self, descriptor):
        return helpers.create_json_type(MySqlTypes.sql_json)


@register_provider('mysql')
class MySqlProviderTypeMap(ProviderTypeMap):
    """MySQL specific type mappings.
    """

    def create_provider_type_mapping(self):
        return MySqlTypeMapping()

    def get_object_converter(self):
        return self.get_json_converter()

    def create_geometry_type_for_name(self, name):
        if name in helpers.GENERIC_GEOMETRY_NAMES:
            return helpers.create_geometry_type(MySqlTypes.sql_geometry)
        if name in helpers.GEOMETRY_TYPE_NAMES:
            return helpers.create_geometry_type(name.lower())
        return None

    def register_sql_type_converters(self):
        reg = self.registry
        t = MySqlTypes

        reg.register_sql_converters(
            SqlToTypeConverter(lambda d: language_type(bool, d, precision=None), 'boolean'),
            t.sql_bool, t.sql_boolean)
        reg.register_sql_converter(t.sql_bit, SqlToTypeConverter(self._bit_to_type))
        reg.register_sql_converters(
            SqlToTypeConverter(self._integer_to_type),
            t.sql_tinyint, t.sql_tinyint_unsigned, t.sql_smallint, t.sql_smallint_unsigned,
            t.sql_mediumint, t.sql_mediumint_unsigned, t.sql_int, t.sql_int_unsigned,
            t.sql_integer, t.sql_integer_unsigned, t.sql_serial, t.sql_bigint,
            t.sql_bigint_unsigned, t.sql_year)
        reg.register_sql_converters(
            SqlToTypeConverter(self._decimal_to_type),
            t.sql_decimal, t.sql_dec, t.sql_fixed, t.sql_numeric, t.sql_decimal_unsigned,
            t.sql_dec_unsigned, t.sql_fixed_unsigned, t.sql_numeric_unsigned)
        reg.register_sql_converters(
            SqlToTypeConverter(lambda d: language_type(np.float32, d)),
            t.sql_float, t.sql_float_unsigned)
        reg.register_sql_converters(
            SqlToTypeConverter(lambda d: language_type(float, d)),
            t.sql_real, t.sql_double, t.sql_double_precision, t.sql_real_unsigned,
            t.sql_double_unsigned, t.sql_double_precision_unsigned)
        reg.register_sql_converters(
            SqlToTypeConverter(self._datetime_to_type),
            t.sql_datetime, t.sql_timestamp, t.sql_time, t.sql_date)

        # char(36) columns hold uuids; checked before the generic text converter
        reg.register_sql_converters(SqlToTypeConverter(self._guid_to_type, 'guid'),
                                    t.sql_char, t.sql_varchar)
        reg.register_sql_converters(
            SqlToTypeConverter(self._text_to_type),
            t.sql_char, t.sql_varchar, t.sql_tinytext, t.sql_text, t.sql_mediumtext,
            t.sql_longtext, t.sql_long_varchar, t.sql_enum, t.sql_set)
        reg.register_sql_converter(t.sql_json,
                                   SqlToTypeConverter(lambda d: language_type(dict, d), 'json'))
        reg.register_sql_converters(
            SqlToTypeConverter(lambda d: language_type(bytes, d), 'binary'),
            t.sql_binary, t.sql_varbinary, t.sql_tinyblob, t.sql_blob, t.sql_mediumblob,
            t.sql_longblob, t.sql_long_varbinary)
        reg.register_sql_converters(SqlToTypeConverter(self._geometry_to_type),
                                    *GEOMETRY_SQL_TYPES)

    @staticmethod
    def _bit_to_type(d):
        width = d.precision or d.length
        if width is None or width == 1:
            return language_type(bool, d, precision=None, length=None)
        return language_type(_BIT_WIDTH_TYPES.get(width, np.int64), d)

    @staticmethod
    def _integer_to_type(d):
        t = MySqlTypes
        match d.base_type_name:
            case t.sql_tinyint:
                if d.precision == 1:
                    return language_type(bool, d, precision=None)
                return language_type(np.int8, d, precision=None)
            case t.sql_tinyint_unsigned:
                return language_type(np.uint8, d, precision=None)
            case t.sql_smallint:
                return language_type(np.int16, d, precision=None)
            case t.sql_smallint_unsigned:
                return language_type(np.uint16, d, precision=None)
            case t.sql_int_unsigned | t.sql_integer_unsigned | t.sql_mediumint_unsigned:
                return language_type(np.uint32, d, precision=None)
            case t.sql_bigint:
                return language_type(np.int64, d, precision=None)
            case t.sql_bigint_unsigned:
                return language_type(np.uint64, d, precision=None)
            case t.sql_serial:
                return language_type(int, d, is_auto_incrementing=True)
        return language_type(int, d, precision=None)

    @staticmethod
    def _decimal_to_type(d):
        return language_type(
            decimal.Decimal, d,
            precision=d.precision or defaults.DEFAULT_DECIMAL_PRECISION,
            scale=d.scale if d.scale is not None else defaults.DEFAULT_DECIMAL_SCALE)

    @staticmethod
    def _geometry_to_type(d):
        name = d.base_type_name
        if name == MySqlTypes.sql_geomcollection:
            name = MySqlTypes.sql_geometrycollection
        return language_type(helpers.get_geometry_type(name), d)

    @staticmethod
    def _datetime_to_type(d):
        t = MySqlTypes
        match d.base_type_name:
            case t.sql_date:
                return language_type(datetime.date, d)
            case t.sql_time:
                return language_type(datetime.time, d)
        return language_type(datetime.datetime, d)

    @staticmethod
    def _guid_to_type(d):
        if d.length != defaults.GUID_STRING_LENGTH:
            return None
        return language_type(uuid.UUID, d, length=None, is_fixed_length=None)

    @staticmethod
    def _text_to_type(d):
        t = MySqlTypes
        name = d.base_type_name
        if name in {t.sql_text, t.sql_mediumtext, t.sql_longtext, t.sql_long_varchar}:
            length = defaults.MAX_LENGTH
        elif name == t.sql_tinytext:
            length = 255
        else:
            length = d.length or defaults.DEFAULT_STRING_LENGTH
        return language_type(str, d, length=length, is_unicode=True,
                             is_fixed_length=name == t.sql_char)
