"""
Provider type map factory.

One lazily created type map per provider kind lives for the whole process;
create_type_map builds independent instances for explicit injection.
"""
import logging
import threading
from typing import TYPE_CHECKING, Any

from dbtypes.exceptions import UnsupportedProviderError
from dbtypes.providers.base import _PROVIDER_REGISTRY
from dbtypes.providers.base import ProviderTypeMap as ProviderTypeMap
from dbtypes.providers.base import register_provider as register_provider
from dbtypes.providers.mapping import ProviderTypeMapping as ProviderTypeMapping
from dbtypes.providers.mysql import MySqlProviderTypeMap as MySqlProviderTypeMap
from dbtypes.providers.postgres import PostgresProviderTypeMap as PostgresProviderTypeMap
from dbtypes.providers.sqlite import SqliteProviderTypeMap as SqliteProviderTypeMap
from dbtypes.providers.sqlserver import SqlServerProviderTypeMap as SqlServerProviderTypeMap
from dbtypes.utils import PROVIDER_ALIASES, get_provider_kind, normalize_provider_name

if TYPE_CHECKING:
    from dbtypes.options import TypeMapOptions

logger = logging.getLogger(__name__)

_instances: dict[str, ProviderTypeMap] = {}
_instances_lock = threading.Lock()


def _validate_provider(provider: str) -> str:
    """Return the registered provider name or raise UnsupportedProviderError."""
    if not isinstance(provider, str):
        raise UnsupportedProviderError(f'Unsupported provider: {provider!r}')
    name = normalize_provider_name(provider)
    if name not in _PROVIDER_REGISTRY:
        available = list(_PROVIDER_REGISTRY.keys())
        raise UnsupportedProviderError(f'Unsupported provider: {provider}. Available: {available}')
    return name


def get_type_map(provider: str | Any) -> ProviderTypeMap:
    """Shared type map for a provider name or a database connection.

    Args:
        provider: Provider name or alias ('postgresql', 'mssql', ...), or a
            connection object whose provider kind can be detected

    Returns
        The process-wide ProviderTypeMap for that provider kind
    """
    if not isinstance(provider, str):
        provider = get_provider_kind(provider)
    name = _validate_provider(provider)

    type_map = _instances.get(name)
    if type_map is None:
        with _instances_lock:
            type_map = _instances.get(name)
            if type_map is None:
                type_map = _PROVIDER_REGISTRY[name]()
                _instances[name] = type_map
                logger.debug(f'Created shared {name} type map')
    return type_map


def create_type_map(options: 'TypeMapOptions') -> ProviderTypeMap:
    """Fresh, unshared type map configured from options."""
    from dbtypes.config import TypeMappingConfig

    name = _validate_provider(options.provider)
    config = TypeMappingConfig(options.config_file) if options.config_file else None
    return _PROVIDER_REGISTRY[name](strict_numeric=options.strict_numeric,
                                    unicode_strings=options.unicode_strings,
                                    config=config,
                                    use_config=options.use_config)


def reset_type_maps() -> None:
    """Drop the shared type maps; the next get_type_map call rebuilds them."""
    with _instances_lock:
        _instances.clear()


def get_available_providers() -> list[str]:
    """Return list of registered provider names."""
    return list(_PROVIDER_REGISTRY.keys())


def is_supported_provider(provider: str) -> bool:
    """Check if a provider name or alias is supported."""
    return isinstance(provider, str) and normalize_provider_name(provider) in _PROVIDER_REGISTRY


def get_provider_class(provider: str) -> type[ProviderTypeMap]:
    """Get the type map class for a provider without instantiating."""
    return _PROVIDER_REGISTRY[_validate_provider(provider)]


__all__ = [
    'PROVIDER_ALIASES',
    'MySqlProviderTypeMap',
    'PostgresProviderTypeMap',
    'ProviderTypeMap',
    'ProviderTypeMapping',
    'SqliteProviderTypeMap',
    'SqlServerProviderTypeMap',
    'create_type_map',
    'get_available_providers',
    'get_provider_class',
    'get_type_map',
    'is_supported_provider',
    'register_provider',
    'reset_type_maps',
    ]
