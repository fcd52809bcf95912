"""
Converter registry: the two ordered multimaps behind every provider type map.

Python type key -> converters producing SQL descriptors, and SQL base type
name -> converters producing Python descriptors. Writers hold a lock and
swap in a new tuple per key; readers never lock and always see a complete
tuple. Lookups that find nothing return None.
"""
import itertools
import logging
import threading
from typing import Any

from dbtypes.cache import cacheable_resolution
from dbtypes.classify import TypeCategory, TypeClassification
from dbtypes.classify import classify_language_type
from dbtypes.converters import SqlToTypeConverter, TypeToSqlConverter
from dbtypes.descriptors import LanguageTypeDescriptor, SqlTypeDescriptor
from dbtypes.exceptions import RegistrationError, ValidationError

logger = logging.getLogger(__name__)

_registry_ids = itertools.count(1)


class ConverterRegistry:
    """Per-provider store of converters with the resolution algorithm.
    """

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.RLock()
        self._type_converters: dict[Any, tuple[TypeToSqlConverter, ...]] = {}
        self._sql_converters: dict[str, tuple[SqlToTypeConverter, ...]] = {}
        self._version = 0
        self._id = next(_registry_ids)

    @property
    def cache_key(self) -> str:
        return f'{self.name}:{self._id}'

    @property
    def version(self) -> int:
        return self._version

    def __repr__(self) -> str:
        return (f'ConverterRegistry({self.name!r}, types={len(self._type_converters)}, '
                f'sql_types={len(self._sql_converters)})')

    # Registration

    def register_type_converter(self, key: Any, converter: TypeToSqlConverter,
                                prepend: bool = False) -> None:
        """Register a converter under a Python type key.

        Args:
            key: Python type, generic origin or placeholder class
            converter: TypeToSqlConverter to add
            prepend: Place ahead of existing converters for the key
        """
        if key is None:
            raise RegistrationError('Converter key cannot be None')
        if not isinstance(converter, TypeToSqlConverter):
            raise RegistrationError(f'Expected TypeToSqlConverter for {key!r}, got {converter!r}')
        try:
            hash(key)
        except TypeError as e:
            raise RegistrationError(f'Converter key must be hashable: {key!r}') from e
        self._append('_type_converters', key, converter, prepend)

    def register_sql_converter(self, sql_base_name: str, converter: SqlToTypeConverter,
                               prepend: bool = False) -> None:
        """Register a converter under a SQL base type name (case-insensitive).
        """
        if not isinstance(sql_base_name, str) or not sql_base_name.strip():
            raise RegistrationError(f'SQL base type name must be a non-empty string: {sql_base_name!r}')
        if not isinstance(converter, SqlToTypeConverter):
            raise RegistrationError(f'Expected SqlToTypeConverter for {sql_base_name!r}, got {converter!r}')
        self._append('_sql_converters', sql_base_name.strip().lower(), converter, prepend)

    def register_type_converters(self, converter: TypeToSqlConverter, *keys: Any) -> None:
        for key in keys:
            self.register_type_converter(key, converter)

    def register_sql_converters(self, converter: SqlToTypeConverter, *names: str) -> None:
        for name in names:
            self.register_sql_converter(name, converter)

    def _append(self, attr: str, key: Any, converter: Any, prepend: bool) -> None:
        # copy-on-write: readers hold a reference to a complete, unchanging map
        with self._lock:
            mapping = dict(getattr(self, attr))
            existing = mapping.get(key, ())
            mapping[key] = (converter, *existing) if prepend else (*existing, converter)
            setattr(self, attr, mapping)
            self._version += 1
        logger.debug(f'{self.name}: registered {converter!r} for {key!r} (prepend={prepend})')

    # Inspection

    def get_type_converters(self, key: Any) -> tuple[TypeToSqlConverter, ...]:
        return self._type_converters.get(key, ())

    def get_sql_converters(self, sql_base_name: str) -> tuple[SqlToTypeConverter, ...]:
        return self._sql_converters.get(sql_base_name.strip().lower(), ())

    def type_keys(self) -> tuple:
        """Registered Python type keys in first-registration order."""
        return tuple(self._type_converters)

    def sql_type_names(self) -> tuple[str, ...]:
        return tuple(self._sql_converters)

    def is_empty(self) -> bool:
        return not self._type_converters and not self._sql_converters

    # Resolution

    def classify(self, language_type: Any) -> TypeClassification:
        """Classify a Python type against the current registrations."""
        if not isinstance(language_type, LanguageTypeDescriptor):
            language_type = LanguageTypeDescriptor(language_type)
        return classify_language_type(language_type.base_type, self._type_converters.keys())

    @cacheable_resolution('language_to_sql')
    def resolve_sql_type(self, descriptor: LanguageTypeDescriptor) -> SqlTypeDescriptor | None:
        """Find the SQL type for a Python type descriptor.

        Candidates are tried in classification order (exact, generic shape,
        enum, array, assignable supertype, POCO); within a key, converters run
        in registration order and the first non-None result wins.

        Returns
            SqlTypeDescriptor, or None when the provider cannot represent the type
        """
        if not isinstance(descriptor, LanguageTypeDescriptor):
            raise ValidationError(f'Expected LanguageTypeDescriptor, got {descriptor!r}')

        converters = self._type_converters
        classification = classify_language_type(descriptor.base_type, converters.keys())
        if classification.category is TypeCategory.UNSUPPORTED:
            logger.debug(f'{self.name}: {descriptor} is not a storable type')
            return None

        for category, key in classification.candidates:
            for converter in converters.get(key, ()):
                result = converter.convert(descriptor)
                if result is not None:
                    logger.debug(f'{self.name}: {descriptor} -> {result} via {category.value} {converter!r}')
                    return result

        logger.debug(f'{self.name}: no SQL type for {descriptor}')
        return None

    def resolve_language_type(self, descriptor: SqlTypeDescriptor) -> LanguageTypeDescriptor | None:
        """Find the Python type for a SQL type descriptor, by base type name.
        """
        if not isinstance(descriptor, SqlTypeDescriptor):
            raise ValidationError(f'Expected SqlTypeDescriptor, got {descriptor!r}')

        for converter in self._sql_converters.get(descriptor.base_type_name.lower(), ()):
            result = converter.convert(descriptor)
            if result is not None:
                return result

        logger.debug(f'{self.name}: no Python type for {descriptor.sql_type_name!r}')
        return None
