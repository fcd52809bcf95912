"""
Provider type-mapping configuration objects.

Each dialect supplies the literal type names and the small factories for
composite types; the shared category converters in ProviderTypeMap decide
which factory applies.
"""
from abc import ABC, abstractmethod
from typing import ClassVar

from dbtypes.descriptors import LanguageTypeDescriptor, SqlTypeDescriptor
from dbtypes.helpers import get_geometry_types


class ProviderTypeMapping(ABC):
    """Literal SQL type names and composite type factories for one dialect.
    """

    boolean_type: ClassVar[str]
    enum_string_type: ClassVar[str]
    is_unicode_provider: ClassVar[bool] = False

    @property
    @abstractmethod
    def numeric_type_map(self) -> dict[type, str]:
        """Numeric Python type -> SQL type name."""

    @abstractmethod
    def create_guid_type(self) -> SqlTypeDescriptor:
        pass

    @abstractmethod
    def create_object_type(self) -> SqlTypeDescriptor:
        pass

    @abstractmethod
    def create_text_type(self, descriptor: LanguageTypeDescriptor) -> SqlTypeDescriptor:
        pass

    @abstractmethod
    def create_datetime_type(self, descriptor: LanguageTypeDescriptor) -> SqlTypeDescriptor:
        pass

    @abstractmethod
    def create_binary_type(self, descriptor: LanguageTypeDescriptor) -> SqlTypeDescriptor:
        pass

    @abstractmethod
    def create_xml_type(self) -> SqlTypeDescriptor:
        pass

    @abstractmethod
    def create_json_type(self, descriptor: LanguageTypeDescriptor) -> SqlTypeDescriptor:
        pass

    def get_supported_geometry_types(self) -> tuple[type, ...]:
        return get_geometry_types()

    def validate(self) -> None:
        """Raise AttributeError when a required type name is missing."""
        for attr in ('boolean_type', 'enum_string_type'):
            if not getattr(self, attr, None):
                raise AttributeError(f'{type(self).__name__} must define {attr}')
