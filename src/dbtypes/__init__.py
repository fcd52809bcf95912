"""
Cross-database type mapping for SQL Server, MySQL, PostgreSQL and SQLite.

Maps Python types plus storage metadata to each provider's SQL type strings,
and introspected SQL type strings back to Python types:

    >>> import dbtypes
    >>> dbtypes.get_sql_type_from_language_type('postgresql', bool)
    'boolean'
    >>> dbtypes.get_language_type_from_sql_type('sqlserver', 'nvarchar(50)')
    <class 'str'>

The module functions are facades over the shared per-provider type maps.
"""
__version__ = '0.1.0'

from typing import Any

from dbtypes import defaults
from dbtypes.classify import ArrayPlaceholder, EnumPlaceholder, PocoPlaceholder
from dbtypes.classify import TypeCategory, TypeClassification
from dbtypes.classify import classify_language_type
from dbtypes.column import Column
from dbtypes.config import TypeMappingConfig
from dbtypes.converters import SqlToTypeConverter, TypeToSqlConverter
from dbtypes.converters import create_static_sql_converter
from dbtypes.converters import create_static_type_converter
from dbtypes.descriptors import LanguageTypeDescriptor, SqlTypeDescriptor
from dbtypes.exceptions import ConfigurationError, ProviderLookupError
from dbtypes.exceptions import RegistrationError, TypeConversionError
from dbtypes.exceptions import TypeMapError, UnsupportedProviderError
from dbtypes.exceptions import ValidationError
from dbtypes.options import TypeMapOptions
from dbtypes.providers import ProviderTypeMap, create_type_map
from dbtypes.providers import get_available_providers, get_type_map
from dbtypes.providers import register_provider
from dbtypes.registry import ConverterRegistry


def get_sql_type_from_language_type(provider: Any, python_type: Any, **metadata: Any) -> str | None:
    """Rendered SQL type for a Python type, or None when unsupported.

    Args:
        provider: Provider name or connection
        python_type: Python type or LanguageTypeDescriptor
        metadata: Descriptor fields (length, precision, scale, is_unicode, ...)
    """
    return get_type_map(provider).get_sql_type_name(python_type, **metadata)


def get_language_type_from_sql_type(provider: Any, sql_type: str) -> Any | None:
    """Python type for a SQL type string, or None when unrecognised.
    """
    language_type = get_type_map(provider).get_language_type(sql_type)
    return language_type.base_type if language_type is not None else None


def try_get_sql_type(provider: Any, python_type: Any,
                     **metadata: Any) -> tuple[bool, SqlTypeDescriptor | None]:
    """(found, SqlTypeDescriptor) for a Python type.
    """
    return get_type_map(provider).try_get_sql_type(python_type, **metadata)


def try_get_language_type(provider: Any,
                          sql_type: str | SqlTypeDescriptor) -> tuple[bool, LanguageTypeDescriptor | None]:
    """(found, LanguageTypeDescriptor) for a SQL type string.
    """
    return get_type_map(provider).try_get_language_type(sql_type)


def register_converter(provider: Any, key: Any,
                       converter: TypeToSqlConverter | SqlToTypeConverter,
                       prepend: bool = False) -> None:
    """Layer a custom converter over a provider's shared type map.
    """
    get_type_map(provider).register_converter(key, converter, prepend)


__all__ = [
    'ArrayPlaceholder',
    'Column',
    'ConfigurationError',
    'ConverterRegistry',
    'EnumPlaceholder',
    'LanguageTypeDescriptor',
    'PocoPlaceholder',
    'ProviderLookupError',
    'ProviderTypeMap',
    'RegistrationError',
    'SqlToTypeConverter',
    'SqlTypeDescriptor',
    'TypeCategory',
    'TypeClassification',
    'TypeConversionError',
    'TypeMapError',
    'TypeMapOptions',
    'TypeMappingConfig',
    'TypeToSqlConverter',
    'UnsupportedProviderError',
    'ValidationError',
    'classify_language_type',
    'create_static_sql_converter',
    'create_static_type_converter',
    'create_type_map',
    'defaults',
    'get_available_providers',
    'get_language_type_from_sql_type',
    'get_sql_type_from_language_type',
    'get_type_map',
    'register_converter',
    'register_provider',
    'try_get_language_type',
    'try_get_sql_type',
    ]
