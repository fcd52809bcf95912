"""
Type mapping exception classes.

Lookups that find no mapping return None rather than raising; the classes
below are reserved for misuse and broken configuration.
"""


class TypeMapError(Exception):
    """Base class for all type mapping errors.
    """


class RegistrationError(TypeMapError):
    """Error registering a converter (null converter, bad key).
    """


class ConfigurationError(TypeMapError):
    """Provider mapping or configuration file is incomplete or invalid.
    """


class ValidationError(TypeMapError):
    """Error in input validation.
    """


class TypeConversionError(TypeMapError):
    """Error converting between a Python type and a SQL type.
    """


class UnsupportedProviderError(TypeMapError, ValueError):
    """Requested provider kind has no registered type map.
    """


ProviderLookupError = (
    UnsupportedProviderError,
    KeyError,
    )
