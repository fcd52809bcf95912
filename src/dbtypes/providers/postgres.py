"""
PostgreSQL type map.

PostgreSQL is the one dialect with native arrays: homogeneous tuples map to
"{element}[]" columns and array columns map back to tuple[T, ...]. Driver
type codes are resolved through psycopg's built-in type registry.

See https://www.postgresql.org/docs/current/datatype.html
"""
import datetime
import decimal
import fractions
import ipaddress
import logging
import threading
import typing
import uuid
import xml.etree.ElementTree as ElementTree
from typing import Any

import numpy as np
from psycopg.postgres import types as pg_types
from psycopg.types.range import Range

from dbtypes import defaults, helpers
from dbtypes.classify import get_array_element_type
from dbtypes.converters import SqlToTypeConverter, TypeToSqlConverter
from dbtypes.descriptors import LanguageTypeDescriptor, SqlTypeDescriptor
from dbtypes.exceptions import ValidationError
from dbtypes.providers.base import ProviderTypeMap, language_type, register_provider
from dbtypes.providers.mapping import ProviderTypeMapping

logger = logging.getLogger(__name__)


class PostgresTypes:
    """PostgreSQL type names."""
    sql_boolean = 'boolean'
    sql_smallint = 'smallint'
    sql_integer = 'integer'
    sql_bigint = 'bigint'
    sql_smallserial = 'smallserial'
    sql_serial = 'serial'
    sql_bigserial = 'bigserial'
    sql_real = 'real'
    sql_double_precision = 'double precision'
    sql_numeric = 'numeric'
    sql_uuid = 'uuid'
    sql_char = 'char'
    sql_varchar = 'varchar'
    sql_text = 'text'
    sql_xml = 'xml'
    sql_json = 'json'
    sql_jsonb = 'jsonb'
    sql_timestamp = 'timestamp'
    sql_date = 'date'
    sql_time = 'time'
    sql_interval = 'interval'
    sql_bytea = 'bytea'
    sql_inet = 'inet'
    sql_cidr = 'cidr'
    sql_geometry = 'geometry'
    sql_int4range = 'int4range'
    sql_int8range = 'int8range'
    sql_numrange = 'numrange'
    sql_tsrange = 'tsrange'
    sql_daterange = 'daterange'


SMALLINT_NAMES = ('smallint', 'int2', 'smallserial', 'serial2')
INTEGER_NAMES = ('integer', 'int', 'int4', 'serial', 'serial4')
BIGINT_NAMES = ('bigint', 'int8', 'bigserial', 'serial8')
REAL_NAMES = ('real', 'float4')
DOUBLE_NAMES = ('double precision', 'float8')
NUMERIC_NAMES = ('numeric', 'decimal')
BOOLEAN_NAMES = ('boolean', 'bool')
BIT_NAMES = ('bit', 'varbit', 'bit varying')
TIME_NAMES = ('time', 'time without time zone', 'time with time zone', 'timetz')
TIMESTAMP_NAMES = ('timestamp', 'timestamp without time zone', 'timestamp with time zone',
                   'timestamptz')
TEXT_NAMES = ('character varying', 'varchar', 'character', 'char', 'bpchar', 'text', 'name',
              'citext')
OTHER_STRING_NAMES = ('jsonpath', 'macaddr', 'macaddr8', 'tsvector', 'tsquery', 'hstore', 'ltree')
RANGE_NAMES = ('int4range', 'int8range', 'numrange', 'tsrange', 'tstzrange', 'daterange')
GEOMETRIC_NAMES = ('box', 'circle', 'line', 'lseg', 'path', 'point', 'polygon', 'geometry',
                   'geography')
SYSTEM_NAMES = ('pg_lsn', 'pg_snapshot', 'txid_snapshot')

# element base names that are never stored as native arrays
NON_ARRAY_ELEMENT_NAMES = frozenset(('bytea', 'json', 'jsonb', 'xml'))

INET_TYPES = (
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Interface,
    ipaddress.IPv6Interface,
    )

CIDR_TYPES = (ipaddress.IPv4Network, ipaddress.IPv6Network)

_SERIAL_TYPES = {
    int: PostgresTypes.sql_serial,
    np.int32: PostgresTypes.sql_serial,
    np.int64: PostgresTypes.sql_bigserial,
    np.int16: PostgresTypes.sql_smallserial,
    }

# psycopg type names resolved to oids on first use
_OID_TYPE_NAMES = (
    'bool', 'int2', 'int4', 'int8', 'float4', 'float8', 'numeric', 'money', 'text', 'varchar',
    'bpchar', 'name', 'date', 'time', 'timetz', 'timestamp', 'timestamptz', 'interval', 'uuid',
    'json', 'jsonb', 'jsonpath', 'xml', 'bytea', 'inet', 'cidr', 'macaddr', 'macaddr8', 'bit',
    'varbit', 'int4range', 'int8range', 'numrange', 'tsrange', 'tstzrange', 'daterange',
    'tsvector', 'tsquery', 'box', 'circle', 'line', 'lseg', 'path', 'point', 'polygon',
    )


class PostgresTypeMapping(ProviderTypeMapping):
    """PostgreSQL type names and composite type factories."""

    boolean_type = PostgresTypes.sql_boolean
    enum_string_type = PostgresTypes.sql_varchar
    is_unicode_provider = True

    _numeric_type_map = {
        int: PostgresTypes.sql_integer,
        float: PostgresTypes.sql_double_precision,
        decimal.Decimal: PostgresTypes.sql_numeric,
        fractions.Fraction: PostgresTypes.sql_numeric,
        np.int8: PostgresTypes.sql_smallint,
        np.uint8: PostgresTypes.sql_smallint,
        np.int16: PostgresTypes.sql_smallint,
        np.uint16: PostgresTypes.sql_integer,
        np.int32: PostgresTypes.sql_integer,
        np.uint32: PostgresTypes.sql_bigint,
        np.int64: PostgresTypes.sql_bigint,
        np.uint64: 'numeric(20,0)',
        np.float16: PostgresTypes.sql_real,
        np.float32: PostgresTypes.sql_real,
        np.float64: PostgresTypes.sql_double_precision,
        }

    @property
    def numeric_type_map(self) -> dict[type, str]:
        return self._numeric_type_map

    def create_guid_type(self):
        return helpers.create_simple_type(PostgresTypes.sql_uuid)

    def create_object_type(self):
        return helpers.create_json_type(PostgresTypes.sql_jsonb)

    def create_text_type(self, descriptor):
        if descriptor.length == defaults.MAX_LENGTH:
            return helpers.create_lob_type(PostgresTypes.sql_text, True)
        sql_type = PostgresTypes.sql_char if descriptor.is_fixed_length else PostgresTypes.sql_varchar
        return helpers.create_string_type(sql_type, descriptor.length, True,
                                          bool(descriptor.is_fixed_length))

    def create_datetime_type(self, descriptor):
        match helpers.get_datetime_kind(descriptor.base_type):
            case 'date':
                return helpers.create_simple_type(PostgresTypes.sql_date)
            case 'time':
                return helpers.create_simple_type(PostgresTypes.sql_time)
            case 'timedelta':
                return helpers.create_simple_type(PostgresTypes.sql_interval)
        return helpers.create_simple_type(PostgresTypes.sql_timestamp)

    def create_binary_type(self, descriptor):
        return helpers.create_simple_type(PostgresTypes.sql_bytea)

    def create_xml_type(self):
        return helpers.create_simple_type(PostgresTypes.sql_xml)

    def create_json_type(self, descriptor):
        return helpers.create_json_type(PostgresTypes.sql_jsonb)


@register_provider('postgresql')
class PostgresProviderTypeMap(ProviderTypeMap):
    """PostgreSQL specific type mappings.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._oid_map: dict[int, str] | None = None
        self._oid_lock = threading.Lock()

    def create_provider_type_mapping(self):
        return PostgresTypeMapping()

    def get_object_converter(self):
        return self.get_json_converter()

    def get_numeric_converter(self):
        converter = super().get_numeric_converter()

        def numeric_to_sql(d):
            if d.is_auto_incrementing and d.base_type in _SERIAL_TYPES:
                return helpers.create_simple_type(_SERIAL_TYPES[d.base_type])
            return converter.convert(d)

        return TypeToSqlConverter(numeric_to_sql)

    def get_array_converter(self):
        json_converter = self.get_json_converter()

        def array_to_sql(d):
            element = get_array_element_type(d.base_type)
            if element is None:
                return json_converter.convert(d)
            element_type = self.registry.resolve_sql_type(LanguageTypeDescriptor(
                element, length=d.length, precision=d.precision, scale=d.scale,
                is_unicode=d.is_unicode, is_fixed_length=d.is_fixed_length))
            if element_type is None or element_type.base_type_name in NON_ARRAY_ELEMENT_NAMES \
                    or element_type.base_type_name.endswith('[]'):
                return json_converter.convert(d)
            return helpers.create_array_type(element_type)

        return TypeToSqlConverter(array_to_sql)

    def create_geometry_type_for_name(self, name):
        if name in helpers.GENERIC_GEOMETRY_NAMES or name in helpers.GEOMETRY_TYPE_NAMES:
            return helpers.create_geometry_type(PostgresTypes.sql_geometry)
        return None

    def register_provider_specific_converters(self):
        reg = self.registry
        reg.register_type_converters(
            TypeToSqlConverter(lambda d: helpers.create_simple_type(PostgresTypes.sql_inet), 'inet'),
            *INET_TYPES)
        reg.register_type_converters(
            TypeToSqlConverter(lambda d: helpers.create_simple_type(PostgresTypes.sql_cidr), 'cidr'),
            *CIDR_TYPES)
        reg.register_type_converter(Range, TypeToSqlConverter(self._range_to_sql, 'range'))

    @staticmethod
    def _range_to_sql(d):
        """Range type by element; a bare Range is a numrange."""
        args = typing.get_args(d.base_type)
        if not args:
            return helpers.create_simple_type(PostgresTypes.sql_numrange)
        element = args[0]
        if element in {int, np.int32, np.int16}:
            return helpers.create_simple_type(PostgresTypes.sql_int4range)
        if element is np.int64:
            return helpers.create_simple_type(PostgresTypes.sql_int8range)
        if element in {decimal.Decimal, float}:
            return helpers.create_simple_type(PostgresTypes.sql_numrange)
        match helpers.get_datetime_kind(element):
            case 'datetime':
                return helpers.create_simple_type(PostgresTypes.sql_tsrange)
            case 'date':
                return helpers.create_simple_type(PostgresTypes.sql_daterange)
        return None

    def register_sql_type_converters(self):
        reg = self.registry

        scalar = {
            SMALLINT_NAMES: SqlToTypeConverter(lambda d: language_type(np.int16, d)),
            INTEGER_NAMES: SqlToTypeConverter(lambda d: language_type(int, d)),
            BIGINT_NAMES: SqlToTypeConverter(lambda d: language_type(np.int64, d)),
            REAL_NAMES: SqlToTypeConverter(lambda d: language_type(np.float32, d)),
            DOUBLE_NAMES: SqlToTypeConverter(lambda d: language_type(float, d)),
            NUMERIC_NAMES: SqlToTypeConverter(self._numeric_to_type),
            ('money',): SqlToTypeConverter(self._money_to_type),
            BOOLEAN_NAMES: SqlToTypeConverter(lambda d: language_type(bool, d)),
            BIT_NAMES: SqlToTypeConverter(self._bit_to_type),
            ('date',): SqlToTypeConverter(lambda d: language_type(datetime.date, d)),
            ('interval',): SqlToTypeConverter(lambda d: language_type(datetime.timedelta, d)),
            TIME_NAMES: SqlToTypeConverter(lambda d: language_type(datetime.time, d, precision=None)),
            TIMESTAMP_NAMES: SqlToTypeConverter(
                lambda d: language_type(datetime.datetime, d, precision=None)),
            TEXT_NAMES: SqlToTypeConverter(self._text_to_type),
            ('uuid',): SqlToTypeConverter(lambda d: language_type(uuid.UUID, d), 'guid'),
            ('json', 'jsonb'): SqlToTypeConverter(lambda d: language_type(dict, d), 'json'),
            OTHER_STRING_NAMES: SqlToTypeConverter(lambda d: language_type(str, d)),
            ('xml',): SqlToTypeConverter(lambda d: language_type(ElementTree.Element, d), 'xml'),
            ('bytea',): SqlToTypeConverter(lambda d: language_type(bytes, d), 'binary'),
            ('inet',): SqlToTypeConverter(lambda d: language_type(ipaddress.IPv4Interface, d)),
            ('cidr',): SqlToTypeConverter(lambda d: language_type(ipaddress.IPv4Network, d)),
            RANGE_NAMES: SqlToTypeConverter(lambda d: language_type(Range, d), 'range'),
            GEOMETRIC_NAMES + SYSTEM_NAMES: SqlToTypeConverter(lambda d: language_type(object, d)),
            }
        for names, converter in scalar.items():
            reg.register_sql_converters(converter, *names)

        array_converter = SqlToTypeConverter(self._array_to_type, 'array')
        for names in scalar:
            for name in names:
                if name not in NON_ARRAY_ELEMENT_NAMES:
                    reg.register_sql_converter(f'{name}[]', array_converter)

    @staticmethod
    def _numeric_to_type(d):
        return language_type(
            decimal.Decimal, d,
            precision=d.precision or defaults.DEFAULT_DECIMAL_PRECISION,
            scale=d.scale if d.scale is not None else defaults.DEFAULT_DECIMAL_SCALE)

    @staticmethod
    def _money_to_type(d):
        return language_type(decimal.Decimal, d,
                             precision=defaults.POSTGRES_MONEY_PRECISION,
                             scale=defaults.POSTGRES_MONEY_SCALE)

    @staticmethod
    def _bit_to_type(d):
        width = d.precision or d.length
        if d.base_type_name == 'bit' and width in {None, 1}:
            return language_type(bool, d, precision=None)
        return language_type(str, d, length=width, precision=None)

    @staticmethod
    def _text_to_type(d):
        name = d.base_type_name
        if name in {'text', 'citext'}:
            length = defaults.MAX_LENGTH
        else:
            length = d.length
        return language_type(str, d, length=length, is_unicode=True,
                             is_fixed_length=name in {'character', 'char', 'bpchar'})

    def _array_to_type(self, d):
        """tuple[T, ...] for an array column, T resolved from the element type."""
        element_name = d.sql_type_name.strip()
        while element_name.endswith('[]'):
            element_name = element_name[:-2].rstrip()
        try:
            element = SqlTypeDescriptor.parse(element_name)
        except ValidationError:
            return None
        element_type = self.registry.resolve_language_type(element)
        if element_type is None:
            return None
        return language_type(tuple[element_type.base_type, ...], element_type,
                             is_auto_incrementing=None)

    def type_code_to_sql_type(self, type_code: Any) -> str | None:
        """SQL type name for a psycopg type oid, e.g. 23 -> 'int4', 1007 -> 'int4[]'.
        """
        if not isinstance(type_code, int) or isinstance(type_code, bool):
            return super().type_code_to_sql_type(type_code)
        return self._get_oid_map().get(type_code)

    def _get_oid_map(self) -> dict[int, str]:
        if self._oid_map is None:
            with self._oid_lock:
                if self._oid_map is None:
                    oid_map = {}
                    for name in _OID_TYPE_NAMES:
                        info = pg_types.get(name)
                        if info is None:
                            logger.debug(f'psycopg has no type info for {name}')
                            continue
                        oid_map[info.oid] = name
                        if info.array_oid:
                            oid_map[info.array_oid] = f'{name}[]'
                    self._oid_map = oid_map
        return self._oid_map
