"""
Converter primitives.

A converter wraps a single function that maps one descriptor kind to the
other and returns None when it cannot represent the input. Converters are
stateless; the same instance may be registered under many keys.
"""
import logging
from collections.abc import Callable

from dbtypes.descriptors import LanguageTypeDescriptor, SqlTypeDescriptor
from dbtypes.exceptions import RegistrationError

logger = logging.getLogger(__name__)


class _Converter:

    def __init__(self, func: Callable, name: str | None = None):
        if not callable(func):
            raise RegistrationError(f'Converter function must be callable, got {func!r}')
        self._func = func
        self.name = name or getattr(func, '__name__', type(func).__name__)

    def __call__(self, descriptor):
        return self.convert(descriptor)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.name!r})'


class TypeToSqlConverter(_Converter):
    """Maps a LanguageTypeDescriptor to a SqlTypeDescriptor, or None."""

    def convert(self, descriptor: LanguageTypeDescriptor) -> SqlTypeDescriptor | None:
        return self._func(descriptor)


class SqlToTypeConverter(_Converter):
    """Maps a SqlTypeDescriptor to a LanguageTypeDescriptor, or None."""

    def convert(self, descriptor: SqlTypeDescriptor) -> LanguageTypeDescriptor | None:
        return self._func(descriptor)


def create_static_sql_converter(name: str, sql_type: str | SqlTypeDescriptor) -> TypeToSqlConverter:
    """Converter that always yields the same SQL type, e.g. from configuration.
    """
    descriptor = sql_type if isinstance(sql_type, SqlTypeDescriptor) else SqlTypeDescriptor.parse(sql_type)

    def convert(_):
        return descriptor

    return TypeToSqlConverter(convert, name)


def create_static_type_converter(name: str, python_type) -> SqlToTypeConverter:
    """Converter that maps any SQL descriptor to one Python type, keeping metadata.
    """
    def convert(d: SqlTypeDescriptor):
        return LanguageTypeDescriptor(
            python_type,
            length=d.length,
            precision=d.precision,
            scale=d.scale,
            is_unicode=d.is_unicode,
            is_fixed_length=d.is_fixed_length,
            is_auto_incrementing=d.is_auto_incrementing,
            )

    return SqlToTypeConverter(convert, name)
