"""
Column metadata carrying a canonical Python type plus per-provider SQL types.

A column records the rendered SQL type string for each provider kind it has
been resolved against, so a schema snapshot can be inspected per dialect
without a live connection.
"""
import logging
import typing
import uuid
from typing import Any, Self

from dbtypes import classify, helpers
from dbtypes.descriptors import LanguageTypeDescriptor
from dbtypes.providers import get_type_map
from dbtypes.providers.base import BINARY_TYPES, BOOLEAN_TYPES, NUMERIC_TYPES
from dbtypes.utils import normalize_provider_name

logger = logging.getLogger(__name__)


class Column:
    """Database column metadata."""

    def __init__(self,
                 name: str,
                 language_type: Any = None,
                 length: int | None = None,
                 precision: int | None = None,
                 scale: int | None = None,
                 nullable: bool | None = None,
                 is_primary_key: bool = False,
                 is_auto_increment: bool = False,
                 is_unicode: bool | None = None,
                 is_fixed_length: bool | None = None,
                 provider_data_types: dict[str, str] | None = None):
        self.name = name
        self.language_type = language_type
        self.length = length
        self.precision = precision
        self.scale = scale
        self.nullable = nullable
        self.is_primary_key = is_primary_key
        self.is_auto_increment = is_auto_increment
        self.is_unicode = is_unicode
        self.is_fixed_length = is_fixed_length
        self.provider_data_types: dict[str, str] = {}
        for provider, sql_type in (provider_data_types or {}).items():
            self.set_provider_data_type(provider, sql_type)

    # Provider data types

    def get_provider_data_type(self, provider: str) -> str | None:
        return self.provider_data_types.get(normalize_provider_name(provider))

    def set_provider_data_type(self, provider: str, sql_type: str) -> Self:
        self.provider_data_types[normalize_provider_name(provider)] = sql_type
        return self

    def to_language_descriptor(self) -> LanguageTypeDescriptor:
        return LanguageTypeDescriptor(
            self.language_type if self.language_type is not None else object,
            length=self.length,
            precision=self.precision,
            scale=self.scale,
            is_unicode=self.is_unicode,
            is_fixed_length=self.is_fixed_length,
            is_auto_incrementing=self.is_auto_increment or None)

    def resolve_provider_data_types(self, *providers: str) -> Self:
        """Fill provider_data_types from each provider's type map.

        Providers that cannot represent the column's type are skipped.
        """
        descriptor = self.to_language_descriptor()
        for provider in providers:
            sql_type = get_type_map(provider).get_sql_type(descriptor)
            if sql_type is None:
                logger.debug(f'{provider}: no SQL type for column {self.name} ({descriptor})')
                continue
            self.set_provider_data_type(provider, sql_type.sql_type_name)
        return self

    # Category predicates

    def _class(self) -> type | None:
        tp = self.language_type
        target = typing.get_origin(tp) or tp
        return target if isinstance(target, type) else None

    def is_boolean(self) -> bool:
        return self.language_type in BOOLEAN_TYPES

    def is_numeric(self) -> bool:
        if self.is_boolean():
            return False
        cls = self._class()
        return cls is not None and issubclass(cls, NUMERIC_TYPES)

    def is_text(self) -> bool:
        cls = self._class()
        return cls is not None and issubclass(cls, str) and not classify.is_enum_type(cls)

    def is_datetime(self) -> bool:
        return helpers.get_datetime_kind(self.language_type) is not None

    def is_binary(self) -> bool:
        cls = self._class()
        return cls is not None and issubclass(cls, BINARY_TYPES)

    def is_guid(self) -> bool:
        return self.language_type is uuid.UUID

    def is_enum(self) -> bool:
        return classify.is_enum_type(self.language_type)

    def is_array(self) -> bool:
        return classify.is_array_type(self.language_type)

    def is_dictionary(self) -> bool:
        return classify.is_dictionary_type(self.language_type)

    def is_enumerable(self) -> bool:
        return classify.is_enumerable_type(self.language_type)

    def get_type_category(self) -> str:
        """Broad category name, checked from most to least specific."""
        for category, predicate in (
                ('boolean', self.is_boolean),
                ('enum', self.is_enum),
                ('numeric', self.is_numeric),
                ('guid', self.is_guid),
                ('text', self.is_text),
                ('datetime', self.is_datetime),
                ('binary', self.is_binary),
                ('array', self.is_array),
                ('dictionary', self.is_dictionary),
                ('enumerable', self.is_enumerable)):
            if predicate():
                return category
        return 'object'

    # Construction from introspection

    @classmethod
    def from_sql_type(cls, name: str, sql_type: str, provider: str, **kwargs) -> Self:
        """Create a Column from an introspected SQL type string.

        Args:
            name: Column name
            sql_type: Full SQL type string, e.g. 'nvarchar(100)'
            provider: Provider kind the type string came from
            kwargs: Column attributes not implied by the type (nullable, ...)

        Returns
            Column with language_type None when the type is not recognised
        """
        language_type = get_type_map(provider).get_language_type(sql_type)
        if language_type is None:
            logger.debug(f'{provider}: unrecognised SQL type {sql_type!r} for column {name}')
            return cls(name, provider_data_types={provider: sql_type}, **kwargs)

        attrs = {
            'length': language_type.length,
            'precision': language_type.precision,
            'scale': language_type.scale,
            'is_unicode': language_type.is_unicode,
            'is_fixed_length': language_type.is_fixed_length,
            'is_auto_increment': bool(language_type.is_auto_incrementing),
            }
        attrs.update(kwargs)
        return cls(name, language_type.base_type, provider_data_types={provider: sql_type}, **attrs)

    @classmethod
    def from_cursor_description(cls, description_item: Any, provider: str) -> Self:
        """Create a Column from a DB-API cursor description item."""
        if normalize_provider_name(provider) == 'postgresql':
            info = cls._extract_named_column_info(description_item)
        else:
            info = cls._extract_sequence_column_info(description_item)

        sql_type = get_type_map(provider).type_code_to_sql_type(info['type_code'])
        if sql_type is None:
            return cls(info['name'], precision=info['precision'], scale=info['scale'],
                       nullable=info['nullable'])

        column = cls.from_sql_type(info['name'], sql_type, provider, nullable=info['nullable'])
        # driver-reported sizes override the type defaults
        if info['display_size'] and info['display_size'] > 0 and column.is_text():
            column.length = info['display_size']
        if info['precision'] is not None:
            column.precision = info['precision']
        if info['scale'] is not None:
            column.scale = info['scale']
        return column

    @classmethod
    def _extract_named_column_info(cls, description_item: Any) -> dict:
        return {
            'name': getattr(description_item, 'name', None),
            'type_code': getattr(description_item, 'type_code', None),
            'display_size': getattr(description_item, 'display_size', None),
            'precision': getattr(description_item, 'precision', None),
            'scale': getattr(description_item, 'scale', None),
            'nullable': None
        }

    @classmethod
    def _extract_sequence_column_info(cls, description_item: Any) -> dict:
        item = tuple(description_item)
        padded = item + (None,) * (7 - len(item))
        return {
            'name': padded[0],
            'type_code': padded[1],
            'display_size': padded[2],
            'precision': padded[4],
            'scale': padded[5],
            'nullable': bool(padded[6]) if padded[6] is not None else None
        }

    def __repr__(self) -> str:
        return (f'Column(name={self.name!r}, '
                f'language_type={classify.get_friendly_name(self.language_type) if self.language_type is not None else None}, '
                f'provider_data_types={self.provider_data_types!r})')

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'language_type': (classify.get_friendly_name(self.language_type)
                              if self.language_type is not None else None),
            'length': self.length,
            'precision': self.precision,
            'scale': self.scale,
            'nullable': self.nullable,
            'is_primary_key': self.is_primary_key,
            'is_auto_increment': self.is_auto_increment,
            'is_unicode': self.is_unicode,
            'is_fixed_length': self.is_fixed_length,
            'provider_data_types': dict(self.provider_data_types),
        }

    @staticmethod
    def get_names(columns: list[Self]) -> list[str]:
        return [col.name for col in columns]

    @staticmethod
    def get_column_by_name(columns: list[Self], name: str) -> Self | None:
        for col in columns:
            if col.name == name:
                return col
        return None

    @staticmethod
    def get_column_types_dict(columns: list[Self]) -> dict[str, dict]:
        return {col.name: col.to_dict() for col in columns}
