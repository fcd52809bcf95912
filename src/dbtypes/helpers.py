"""
Factory helpers for SQL type descriptors shared by all providers.
"""
import datetime
import logging
import typing
from dataclasses import replace
from typing import Any

from dbtypes import defaults
from dbtypes.descriptors import SqlTypeDescriptor

logger = logging.getLogger(__name__)

GEOMETRY_TYPE_NAMES = (
    'Point',
    'LineString',
    'Polygon',
    'MultiPoint',
    'MultiLineString',
    'MultiPolygon',
    'GeometryCollection',
    )

GENERIC_GEOMETRY_NAMES = ('BaseGeometry', 'Geometry')


def create_simple_type(sql_type: str) -> SqlTypeDescriptor:
    return SqlTypeDescriptor.parse(sql_type)


def create_decimal_type(sql_type: str, precision: int | None = None,
                        scale: int | None = None) -> SqlTypeDescriptor:
    """Decimal type, defaulting to precision 16 and scale 4.
    """
    precision = defaults.DEFAULT_DECIMAL_PRECISION if precision is None else precision
    scale = defaults.DEFAULT_DECIMAL_SCALE if scale is None else scale
    return replace(SqlTypeDescriptor.parse(f'{sql_type}({precision},{scale})'),
                   precision=precision, scale=scale)


def create_string_type(sql_type: str, length: int | None = None, is_unicode: bool = False,
                       is_fixed_length: bool = False) -> SqlTypeDescriptor:
    """Character type rendered with a length, or '(max)' for MAX_LENGTH.

    Args:
        sql_type: Base type keyword, e.g. 'nvarchar'
        length: Character length; defaults to DEFAULT_STRING_LENGTH
        is_unicode: Whether the type stores unicode text
        is_fixed_length: Whether the type is blank-padded

    Returns
        SqlTypeDescriptor; the length is None for max-length types
    """
    length = defaults.DEFAULT_STRING_LENGTH if length is None else length
    if length == defaults.MAX_LENGTH:
        descriptor = SqlTypeDescriptor.parse(f'{sql_type}(max)')
        length = None
    else:
        descriptor = SqlTypeDescriptor.parse(f'{sql_type}({length})')
    return replace(descriptor, length=length, is_unicode=is_unicode,
                   is_fixed_length=is_fixed_length)


def create_guid_string_type(sql_type: str, is_unicode: bool = False,
                            is_fixed_length: bool = True) -> SqlTypeDescriptor:
    return create_string_type(sql_type, defaults.GUID_STRING_LENGTH, is_unicode, is_fixed_length)


def create_enum_string_type(sql_type: str, is_unicode: bool = False) -> SqlTypeDescriptor:
    return create_string_type(sql_type, defaults.DEFAULT_ENUM_LENGTH, is_unicode, False)


def create_datetime_type(sql_type: str, precision: int | None = None) -> SqlTypeDescriptor:
    if precision is None:
        return SqlTypeDescriptor.parse(sql_type)
    return replace(SqlTypeDescriptor.parse(f'{sql_type}({precision})'), precision=precision)


def create_binary_type(sql_type: str, length: int | None = None,
                       is_fixed_length: bool = False) -> SqlTypeDescriptor:
    """Binary type; unparameterised when no length is given.
    """
    if length == defaults.MAX_LENGTH:
        return replace(SqlTypeDescriptor.parse(f'{sql_type}(max)'),
                       length=None, is_fixed_length=is_fixed_length)
    if length is not None:
        return replace(SqlTypeDescriptor.parse(f'{sql_type}({length})'),
                       length=length, is_fixed_length=is_fixed_length)
    return replace(SqlTypeDescriptor.parse(sql_type), is_fixed_length=is_fixed_length)


def create_json_type(sql_type: str, is_text: bool = False) -> SqlTypeDescriptor:
    descriptor = SqlTypeDescriptor.parse(sql_type)
    if is_text:
        # text-backed json is unbounded
        return replace(descriptor, length=defaults.MAX_LENGTH)
    return descriptor


def create_geometry_type(sql_type: str) -> SqlTypeDescriptor:
    return SqlTypeDescriptor.parse(sql_type)


def create_lob_type(sql_type: str, is_unicode: bool = False) -> SqlTypeDescriptor:
    return replace(SqlTypeDescriptor.parse(sql_type), length=defaults.MAX_LENGTH,
                   is_unicode=is_unicode)


def create_array_type(element: SqlTypeDescriptor | str) -> SqlTypeDescriptor:
    """Native array of the element type, e.g. 'integer[]'."""
    element = element if isinstance(element, SqlTypeDescriptor) else SqlTypeDescriptor.parse(element)
    return replace(SqlTypeDescriptor.parse(f'{element.sql_type_name}[]'),
                   length=element.length, precision=element.precision, scale=element.scale,
                   is_unicode=element.is_unicode, is_fixed_length=element.is_fixed_length)


def create_precision_type(sql_type: str, precision: int) -> SqlTypeDescriptor:
    return replace(SqlTypeDescriptor.parse(f'{sql_type}({precision})'), precision=precision)


def get_qualified_short_name(tp: Any) -> str | None:
    """Module-qualified class name, e.g. 'shapely.geometry.point.Point'."""
    module = getattr(tp, '__module__', None)
    qualname = getattr(tp, '__qualname__', None)
    if not module or not qualname:
        return None
    return f'{module}.{qualname}'


def is_geometry_type(tp: Any) -> bool:
    short_name = get_qualified_short_name(tp)
    return bool(short_name) and short_name.startswith('shapely.')


def get_geometry_type_name(tp: Any) -> str | None:
    """Class name of a shapely geometry type, e.g. 'Point'."""
    if not is_geometry_type(tp):
        return None
    return tp.__name__


def get_geometry_types() -> tuple[type, ...]:
    """Installed shapely geometry classes; empty when shapely is missing.
    """
    try:
        import shapely.geometry as geometry
        from shapely.geometry.base import BaseGeometry
    except ImportError:
        logger.debug('shapely is not installed, geometry types are unavailable')
        return ()
    return (BaseGeometry, *(getattr(geometry, name) for name in GEOMETRY_TYPE_NAMES))


def get_geometry_type(name: str) -> type:
    """Shapely class for a geometry name, or object when unavailable."""
    for tp in get_geometry_types():
        if tp.__name__.lower() == name.lower():
            return tp
    if name.lower() in {'geometry', 'geography'}:
        generic = get_geometry_types()
        if generic:
            return generic[0]
    return object


def get_datetime_kind(tp: Any) -> str | None:
    """One of 'datetime', 'date', 'time', 'timedelta' for date/time types.

    Subclasses (e.g. pandas.Timestamp) map to their standard library base.
    datetime is tested before date because it subclasses date.
    """
    if not isinstance(tp, type) or typing.get_origin(tp) is not None:
        return None
    for kind, base in (('datetime', datetime.datetime), ('date', datetime.date),
                       ('time', datetime.time), ('timedelta', datetime.timedelta)):
        if issubclass(tp, base):
            return kind
    return None
