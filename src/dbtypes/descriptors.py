"""
Language-side and SQL-side type descriptors.

Both descriptors are immutable. A SqlTypeDescriptor is either parsed from a
full SQL type string (introspection) or built by a converter (generation).
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Self

from dbtypes.classify import get_friendly_name, normalize_language_type
from dbtypes.exceptions import ValidationError

logger = logging.getLogger(__name__)

_PARAMS_RE = re.compile(r'\(([^()]*)\)')


@dataclass(frozen=True)
class LanguageTypeDescriptor:
    """Python type plus storage metadata.

    Unset (None) flags mean "use the provider default".
    """
    base_type: Any
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    is_unicode: bool | None = None
    is_fixed_length: bool | None = None
    is_auto_incrementing: bool | None = None
    compatible_types: tuple = field(default=(), compare=False)

    def __post_init__(self):
        if self.base_type is None:
            raise ValidationError('base_type cannot be None')
        object.__setattr__(self, 'base_type', normalize_language_type(self.base_type))
        object.__setattr__(self, 'compatible_types', tuple(self.compatible_types))

    def __str__(self) -> str:
        parts = [get_friendly_name(self.base_type)]
        if (self.length or 0) > 0:
            parts.append(f'length({self.length})')
        if (self.precision or 0) > 0:
            if (self.scale or 0) > 0:
                parts.append(f'precision({self.precision},{self.scale})')
            else:
                parts.append(f'precision({self.precision})')
        if self.is_auto_incrementing:
            parts.append('auto_increment')
        if self.is_unicode:
            parts.append('unicode')
        return ' '.join(parts)


@dataclass(frozen=True)
class SqlTypeDescriptor:
    """Provider SQL type: lower-case base name, rendered name and metadata.
    """
    base_type_name: str
    sql_type_name: str
    length: int | None = None
    precision: int | None = None
    scale: int | None = None
    is_unicode: bool | None = None
    is_fixed_length: bool | None = None
    is_auto_incrementing: bool | None = None

    def __post_init__(self):
        if not self.base_type_name or not self.sql_type_name:
            raise ValidationError('SQL type names cannot be empty')
        object.__setattr__(self, 'base_type_name', _normalize_base_name(self.base_type_name))

    def __str__(self) -> str:
        return self.sql_type_name

    @classmethod
    def parse(cls, sql_type_name: str) -> Self:
        """Parse a full SQL type string such as 'decimal(10,2)' or 'nvarchar(max)'.

        Never raises for malformed parameters; the result then carries only the
        base type name. Empty input is a programming error.

        Args:
            sql_type_name: Type string as it appears in DDL or schema metadata

        Returns
            SqlTypeDescriptor with length/precision/scale populated when known
        """
        if not isinstance(sql_type_name, str) or not sql_type_name.strip():
            raise ValidationError('Value cannot be null or whitespace: sql_type_name')

        sql_type_name = sql_type_name.strip()
        base_type_name = _normalize_base_name(sql_type_name)

        params = _extract_parameters(sql_type_name)
        if params is None:
            logger.debug(f'Unrecognized parameters in SQL type {sql_type_name!r}')
            return cls(base_type_name, sql_type_name)

        metadata: dict[str, Any] = {}
        if 'serial' in base_type_name:
            metadata['is_auto_incrementing'] = True

        numbers = [int(p) for p in params if p != 'max']
        if is_length_style(base_type_name):
            if numbers and params[0] != 'max':
                metadata['length'] = numbers[0]
            if 'char' in base_type_name and 'varchar' not in base_type_name \
                    and 'varying' not in base_type_name:
                metadata['is_fixed_length'] = True
            if any(n in base_type_name for n in ('nchar', 'nvarchar', 'ntext')):
                metadata['is_unicode'] = True
        elif numbers:
            metadata['precision'] = numbers[0]
            if len(numbers) > 1:
                metadata['scale'] = numbers[1]

        return cls(base_type_name, sql_type_name, **metadata)


def is_length_style(base_type_name: str) -> bool:
    """Character, text and binary types carry a length instead of precision."""
    return any(n in base_type_name for n in ('char', 'text', 'binary'))


def _normalize_base_name(sql_type_name: str) -> str:
    base = _PARAMS_RE.sub('', sql_type_name)
    base = base.split('(')[0]
    return ' '.join(base.split()).lower()


def _extract_parameters(sql_type_name: str) -> list[str] | None:
    """Parameter tokens of the first parenthesised group.

    Returns an empty list when there are no parameters and None when the
    parameter list is malformed.
    """
    if '(' not in sql_type_name:
        return []
    match = _PARAMS_RE.search(sql_type_name)
    if match is None or sql_type_name.count('(') != sql_type_name.count(')'):
        return None
    params = [p.strip().lower() for p in match.group(1).split(',')]
    if not all(p.isdigit() or p == 'max' for p in params):
        return None
    return params
