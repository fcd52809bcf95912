from dataclasses import dataclass

from dbtypes.exceptions import ConfigurationError
from dbtypes.providers import get_available_providers, is_supported_provider
from dbtypes.utils import normalize_provider_name

__all__ = ['TypeMapOptions']


@dataclass
class TypeMapOptions:
    """Options

    supported provider names: `sqlserver`, `mysql`, `postgresql`, `sqlite`

    Type mapping options:
    - strict_numeric: Report unmapped numeric types as not found instead of
      falling back to the provider's integer type (default: False)
    - unicode_strings: Default for text descriptors that leave is_unicode
      unset; None keeps the provider default
    - config_file: JSON file with custom type mappings
    - use_config: Whether to apply custom mappings at all (default: True)
    """
    provider: str = 'postgresql'
    strict_numeric: bool = False
    unicode_strings: bool | None = None
    config_file: str | None = None
    use_config: bool = True

    def __post_init__(self):
        if not is_supported_provider(self.provider):
            available = get_available_providers()
            raise ConfigurationError(f'provider must be one of: {available}')
        self.provider = normalize_provider_name(self.provider)
