"""
Base provider type map.

Defines the abstract base class every dialect inherits from. A provider type
map owns one ConverterRegistry, populates it exactly once on first use, and
exposes the try-get API used by DDL generation and schema introspection.

Standard category converters are built from the dialect's
ProviderTypeMapping; dialects override individual get_*_converter methods
where string substitution is not enough.
"""
import collections
import collections.abc
import datetime
import decimal
import fractions
import io
import logging
import threading
import uuid
import xml.etree.ElementTree as ElementTree
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np
from psycopg.types.json import Json, Jsonb

from dbtypes import defaults, helpers
from dbtypes.cache import cacheable_resolution
from dbtypes.classify import PLACEHOLDER_TYPES, ArrayPlaceholder
from dbtypes.classify import EnumPlaceholder, PocoPlaceholder
from dbtypes.config.type_mapping import TypeMappingConfig, resolve_type_path
from dbtypes.converters import SqlToTypeConverter, TypeToSqlConverter
from dbtypes.converters import create_static_sql_converter
from dbtypes.converters import create_static_type_converter
from dbtypes.descriptors import LanguageTypeDescriptor, SqlTypeDescriptor
from dbtypes.exceptions import ConfigurationError, RegistrationError
from dbtypes.exceptions import TypeConversionError, ValidationError
from dbtypes.registry import ConverterRegistry

if TYPE_CHECKING:
    from dbtypes.providers.mapping import ProviderTypeMapping

logger = logging.getLogger(__name__)

# Registry of provider kind -> type map class
# Defined here to avoid circular imports (concrete providers import from base)
_PROVIDER_REGISTRY: dict[str, type['ProviderTypeMap']] = {}

def register_provider(provider: str):
    """Decorator to register a type map class for a provider kind.

    Usage:
        @register_provider('mysql')
        class MySqlProviderTypeMap(ProviderTypeMap):
            ...
    """
    def decorator(cls: type['ProviderTypeMap']) -> type['ProviderTypeMap']:
        cls.provider_name = provider
        _PROVIDER_REGISTRY[provider] = cls
        return cls
    return decorator


BOOLEAN_TYPES = (bool, np.bool_)

NUMERIC_TYPES = (
    int,
    float,
    decimal.Decimal,
    fractions.Fraction,
    np.int8,
    np.int16,
    np.int32,
    np.int64,
    np.uint8,
    np.uint16,
    np.uint32,
    np.uint64,
    np.float16,
    np.float32,
    np.float64,
    )

TEXT_TYPES = (str, io.StringIO, io.TextIOBase)

DATETIME_TYPES = (datetime.datetime, datetime.date, datetime.time, datetime.timedelta)

BINARY_TYPES = (bytes, bytearray, memoryview, io.BytesIO, io.BufferedIOBase)

XML_TYPES = (ElementTree.Element, ElementTree.ElementTree)

JSON_TYPES = (Json, Jsonb)

ENUMERABLE_TYPES = (
    dict[str, str],
    dict[str, Any],
    list[str],
    set[str],
    dict,
    list,
    set,
    frozenset,
    collections.OrderedDict,
    collections.defaultdict,
    collections.deque,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Collection,
    collections.abc.Iterable,
    )

# Metadata variants used to discover which Python types render to a SQL type
_METADATA_VARIANTS = (
    {},
    {'is_unicode': True},
    {'is_fixed_length': True},
    {'is_unicode': True, 'is_fixed_length': True},
    {'length': defaults.MAX_LENGTH},
    {'is_auto_incrementing': True},
    )


class ProviderTypeMap(ABC):
    """Base class for provider-specific type maps.
    """

    provider_name: ClassVar[str] = ''

    def __init__(self, strict_numeric: bool = False, unicode_strings: bool | None = None,
                 config: TypeMappingConfig | None = None, use_config: bool = True):
        self.strict_numeric = strict_numeric
        self.unicode_strings = unicode_strings
        self.registry = ConverterRegistry(self.provider_name)
        self._config = config
        self._use_config = use_config
        self._mapping: 'ProviderTypeMapping | None' = None
        self._populated = False
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f'{type(self).__name__}(populated={self._populated})'

    @property
    def cache_key(self) -> str:
        return self.registry.cache_key

    @property
    def version(self) -> int:
        return self.registry.version

    @property
    def is_populated(self) -> bool:
        return self._populated

    @abstractmethod
    def create_provider_type_mapping(self) -> 'ProviderTypeMapping':
        """Build the dialect's type-name configuration object."""

    @abstractmethod
    def register_sql_type_converters(self) -> None:
        """Register SQL base type name -> Python type converters."""

    def register_provider_specific_converters(self) -> None:
        """Hook for additional Python type -> SQL converters."""

    @property
    def mapping(self) -> 'ProviderTypeMapping':
        if self._mapping is None:
            try:
                mapping = self.create_provider_type_mapping()
                mapping.validate()
            except (TypeError, AttributeError) as e:
                raise ConfigurationError(
                    f'Invalid type mapping for provider {self.provider_name}: {e}') from e
            self._mapping = mapping
        return self._mapping

    # Population

    def ensure_populated(self) -> None:
        """Populate the registry exactly once, even under concurrent first use."""
        if self._populated:
            return
        with self._lock:
            if self._populated:
                return
            self.register_type_to_sql_converters()
            self.register_sql_type_converters()
            self._register_configured_converters()
            self._populated = True
        logger.info(f'Populated {self.provider_name} type map: '
                    f'{len(self.registry.type_keys())} language types, '
                    f'{len(self.registry.sql_type_names())} SQL types')

    def register_type_to_sql_converters(self) -> None:
        reg = self.registry
        reg.register_type_converters(self.get_boolean_converter(), *BOOLEAN_TYPES)
        reg.register_type_converters(self.get_numeric_converter(), *NUMERIC_TYPES)
        reg.register_type_converter(uuid.UUID, self.get_guid_converter())
        reg.register_type_converters(self.get_text_converter(), *TEXT_TYPES)
        reg.register_type_converters(self.get_xml_converter(), *XML_TYPES)
        reg.register_type_converters(self.get_json_converter(), *JSON_TYPES)
        reg.register_type_converters(self.get_datetime_converter(), *DATETIME_TYPES)
        reg.register_type_converters(self.get_binary_converter(), *BINARY_TYPES)
        reg.register_type_converter(object, self.get_object_converter())
        reg.register_type_converters(self.get_enumerable_converter(), *ENUMERABLE_TYPES)

        # placeholders for the unbounded enum, array and plain class families
        reg.register_type_converter(EnumPlaceholder, self.get_enum_converter())
        reg.register_type_converter(ArrayPlaceholder, self.get_array_converter())
        reg.register_type_converter(PocoPlaceholder, self.get_poco_converter())

        geometry_types = self.mapping.get_supported_geometry_types()
        if geometry_types:
            reg.register_type_converters(self.get_geometric_converter(), *geometry_types)

        self.register_provider_specific_converters()

    def _register_configured_converters(self) -> None:
        if not self._use_config:
            return
        config = self._config or TypeMappingConfig.get_instance()
        try:
            for path, sql_type in config.get_language_type_mappings(self.provider_name).items():
                python_type = resolve_type_path(path)
                if python_type is None:
                    continue
                converter = create_static_sql_converter(f'config:{path}', sql_type)
                self.registry.register_type_converter(python_type, converter, prepend=True)

            for sql_type, path in config.get_sql_type_mappings(self.provider_name).items():
                python_type = resolve_type_path(path)
                if python_type is None:
                    continue
                base_name = SqlTypeDescriptor.parse(sql_type).base_type_name
                converter = create_static_type_converter(f'config:{sql_type}', python_type)
                self.registry.register_sql_converter(base_name, converter, prepend=True)
        except (ValidationError, RegistrationError) as e:
            raise ConfigurationError(f'Invalid configured mapping for {self.provider_name}: {e}') from e

    # Standard converters

    def get_boolean_converter(self) -> TypeToSqlConverter:
        mapping = self.mapping

        def boolean_to_sql(d):
            return helpers.create_simple_type(mapping.boolean_type)

        return TypeToSqlConverter(boolean_to_sql)

    def get_numeric_converter(self) -> TypeToSqlConverter:
        mapping = self.mapping

        def numeric_to_sql(d):
            # subclasses use their nearest mapped base
            sql_type = next((mapping.numeric_type_map[cls]
                             for cls in getattr(d.base_type, '__mro__', (d.base_type,))
                             if cls in mapping.numeric_type_map), None)
            if sql_type is None:
                return self.numeric_fallback(d)
            if issubclass(d.base_type, (decimal.Decimal, fractions.Fraction)):
                return helpers.create_decimal_type(sql_type, d.precision, d.scale)
            return helpers.create_simple_type(sql_type)

        return TypeToSqlConverter(numeric_to_sql)

    def numeric_fallback(self, d: LanguageTypeDescriptor) -> SqlTypeDescriptor | None:
        """SQL type for a numeric type with no explicit mapping.

        Lenient mode picks the provider's 32-bit integer; strict mode reports
        no match.
        """
        if self.strict_numeric:
            logger.debug(f'{self.provider_name}: no numeric mapping for {d}')
            return None
        fallback = self.mapping.numeric_type_map[int]
        logger.warning(f'{self.provider_name}: no numeric mapping for {d}, using {fallback}')
        return helpers.create_simple_type(fallback)

    def get_guid_converter(self) -> TypeToSqlConverter:
        mapping = self.mapping

        def guid_to_sql(d):
            return mapping.create_guid_type()

        return TypeToSqlConverter(guid_to_sql)

    def get_enum_converter(self) -> TypeToSqlConverter:
        mapping = self.mapping

        def enum_to_sql(d):
            return helpers.create_enum_string_type(mapping.enum_string_type,
                                                   mapping.is_unicode_provider)

        return TypeToSqlConverter(enum_to_sql)

    def get_json_converter(self) -> TypeToSqlConverter:
        mapping = self.mapping

        def json_to_sql(d):
            return mapping.create_json_type(d)

        return TypeToSqlConverter(json_to_sql)

    def get_array_converter(self) -> TypeToSqlConverter:
        return self.get_json_converter()

    def get_enumerable_converter(self) -> TypeToSqlConverter:
        return self.get_json_converter()

    def get_poco_converter(self) -> TypeToSqlConverter:
        return self.get_json_converter()

    def get_object_converter(self) -> TypeToSqlConverter:
        mapping = self.mapping

        def object_to_sql(d):
            return mapping.create_object_type()

        return TypeToSqlConverter(object_to_sql)

    def get_text_converter(self) -> TypeToSqlConverter:
        mapping = self.mapping

        def text_to_sql(d):
            if d.is_unicode is None and self.unicode_strings is not None:
                d = replace(d, is_unicode=self.unicode_strings)
            return mapping.create_text_type(d)

        return TypeToSqlConverter(text_to_sql)

    def get_datetime_converter(self) -> TypeToSqlConverter:
        mapping = self.mapping

        def datetime_to_sql(d):
            return mapping.create_datetime_type(d)

        return TypeToSqlConverter(datetime_to_sql)

    def get_binary_converter(self) -> TypeToSqlConverter:
        mapping = self.mapping

        def binary_to_sql(d):
            return mapping.create_binary_type(d)

        return TypeToSqlConverter(binary_to_sql)

    def get_xml_converter(self) -> TypeToSqlConverter:
        mapping = self.mapping

        def xml_to_sql(d):
            return mapping.create_xml_type()

        return TypeToSqlConverter(xml_to_sql)

    def get_geometric_converter(self) -> TypeToSqlConverter:

        def geometry_to_sql(d):
            name = helpers.get_geometry_type_name(d.base_type)
            if not name:
                return None
            return self.create_geometry_type_for_name(name)

        return TypeToSqlConverter(geometry_to_sql)

    def create_geometry_type_for_name(self, name: str) -> SqlTypeDescriptor | None:
        """SQL type for a geometry class name; None means no geometry support."""
        return None

    # Public API

    def try_get_sql_type(self, descriptor: LanguageTypeDescriptor | Any,
                         **metadata) -> tuple[bool, SqlTypeDescriptor | None]:
        """Find the SQL type for a Python type.

        Args:
            descriptor: LanguageTypeDescriptor or a bare Python type
            metadata: Descriptor fields when a bare type is given

        Returns
            (found, SqlTypeDescriptor or None)
        """
        sql_type = self.get_sql_type(descriptor, **metadata)
        return sql_type is not None, sql_type

    def get_sql_type(self, descriptor: LanguageTypeDescriptor | Any,
                     **metadata) -> SqlTypeDescriptor | None:
        if not isinstance(descriptor, LanguageTypeDescriptor):
            descriptor = LanguageTypeDescriptor(descriptor, **metadata)
        self.ensure_populated()
        return self.registry.resolve_sql_type(descriptor)

    def get_sql_type_name(self, descriptor: LanguageTypeDescriptor | Any,
                          **metadata) -> str | None:
        """Rendered SQL type string for a Python type, or None."""
        sql_type = self.get_sql_type(descriptor, **metadata)
        return sql_type.sql_type_name if sql_type is not None else None

    def try_get_language_type(self, sql_type: str | SqlTypeDescriptor
                              ) -> tuple[bool, LanguageTypeDescriptor | None]:
        """Find the Python type for a SQL type string.

        Returns
            (found, LanguageTypeDescriptor or None); the descriptor lists the
            other Python types that render to the same SQL type
        """
        language_type = self.get_language_type(sql_type)
        return language_type is not None, language_type

    def get_language_type(self, sql_type: str | SqlTypeDescriptor) -> LanguageTypeDescriptor | None:
        if not isinstance(sql_type, SqlTypeDescriptor):
            sql_type = SqlTypeDescriptor.parse(sql_type)
        self.ensure_populated()
        result = self.registry.resolve_language_type(sql_type)
        if result is None:
            return None
        compatible = tuple(t for t in self.get_compatible_language_types(sql_type.base_type_name)
                           if t != result.base_type)
        return replace(result, compatible_types=compatible)

    def require_sql_type(self, descriptor: LanguageTypeDescriptor | Any,
                         **metadata) -> SqlTypeDescriptor:
        """Like get_sql_type, but raise TypeConversionError when unsupported."""
        sql_type = self.get_sql_type(descriptor, **metadata)
        if sql_type is None:
            raise TypeConversionError(f'{self.provider_name} cannot represent {descriptor!r}')
        return sql_type

    def require_language_type(self, sql_type: str | SqlTypeDescriptor) -> LanguageTypeDescriptor:
        """Like get_language_type, but raise TypeConversionError when unknown."""
        language_type = self.get_language_type(sql_type)
        if language_type is None:
            raise TypeConversionError(f'{self.provider_name} has no Python type for {sql_type}')
        return language_type

    @cacheable_resolution('compatible_types')
    def get_compatible_language_types(self, sql_base_name: str) -> tuple:
        """Registered Python types whose conversion yields this SQL base type.
        """
        self.ensure_populated()
        sql_base_name = sql_base_name.strip().lower()
        compatible = []
        for key in self.registry.type_keys():
            if key in PLACEHOLDER_TYPES:
                continue
            for variant in _METADATA_VARIANTS:
                result = self.registry.resolve_sql_type(LanguageTypeDescriptor(key, **variant))
                if result is not None and result.base_type_name == sql_base_name:
                    compatible.append(key)
                    break
        return tuple(compatible)

    def register_converter(self, key: Any, converter: TypeToSqlConverter | SqlToTypeConverter,
                           prepend: bool = False) -> None:
        """Add a custom converter on top of the built-in registrations.

        TypeToSqlConverter instances are keyed by Python type; SqlToTypeConverter
        instances by SQL base type name. Prepending overrides the defaults
        without removing them.
        """
        if converter is None:
            raise RegistrationError('Converter cannot be None')
        self.ensure_populated()
        if isinstance(converter, TypeToSqlConverter):
            self.registry.register_type_converter(key, converter, prepend)
        elif isinstance(converter, SqlToTypeConverter):
            if isinstance(key, str):
                key = SqlTypeDescriptor.parse(key).base_type_name
            self.registry.register_sql_converter(key, converter, prepend)
        else:
            raise RegistrationError(f'Unknown converter kind: {converter!r}')

    def type_code_to_sql_type(self, type_code: Any) -> str | None:
        """SQL type name for a driver type code (declared type strings pass through)."""
        if isinstance(type_code, str) and type_code.strip():
            return type_code.strip()
        return None


def language_type(python_type: Any, d: SqlTypeDescriptor, **overrides) -> LanguageTypeDescriptor:
    """Python descriptor carrying the SQL descriptor's metadata."""
    fields = {
        'length': d.length,
        'precision': d.precision,
        'scale': d.scale,
        'is_unicode': d.is_unicode,
        'is_fixed_length': d.is_fixed_length,
        'is_auto_incrementing': d.is_auto_incrementing,
        }
    fields.update(overrides)
    return LanguageTypeDescriptor(python_type, **fields)
