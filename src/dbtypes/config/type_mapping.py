"""
Configuration for custom type mappings.

A JSON file maps, per provider, dotted Python type paths to SQL type strings
(`language_types`) and SQL type names to dotted Python type paths
(`sql_types`):

    {
        "postgresql": {
            "language_types": {"ipaddress.IPv6Address": "inet"},
            "sql_types": {"citext": "builtins.str"}
        }
    }

Entries are registered ahead of the built-in converters when a provider
type map is populated.
"""
import importlib
import json
import logging
import pathlib
from typing import Any

from dbtypes.utils import normalize_provider_name

logger = logging.getLogger(__name__)

class TypeMappingConfig:
    """Configuration for custom type mappings"""

    _instance = None

    @classmethod
    def get_instance(cls):
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton so the next access reloads configuration."""
        cls._instance = None

    def __init__(self, config_file=None):
        self._mappings: dict[str, dict[str, dict[str, str]]] = {}
        self.loaded_from: list[str] = []

        if config_file:
            self.load_config(config_file)
        else:
            default_locations = [
                pathlib.Path('~/.config/dbtypes/type_mapping.json').expanduser(),
                '/etc/dbtypes/type_mapping.json',
                'type_mapping.json'
            ]

            for location in default_locations:
                if pathlib.Path(location).exists():
                    self.load_config(location)
                    break

    def _provider_mappings(self, provider: str) -> dict[str, dict[str, str]]:
        return self._mappings.setdefault(normalize_provider_name(provider),
                                         {'language_types': {}, 'sql_types': {}})

    def load_config(self, config_file) -> bool:
        """Load configuration from file, merging into existing mappings.

        Returns
            True when the file was read, False when it could not be loaded
        """
        try:
            with pathlib.Path(config_file).open() as f:
                config = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f'Failed to load type mapping config: {e}')
            return False

        if not isinstance(config, dict):
            logger.warning(f'Ignoring type mapping config {config_file}: top level must be an object')
            return False

        for provider, mappings in config.items():
            if not isinstance(mappings, dict):
                logger.warning(f'Ignoring type mapping entry for {provider}: expected an object')
                continue
            target = self._provider_mappings(provider)
            target['language_types'].update(mappings.get('language_types', {}))
            target['sql_types'].update({k.strip().lower(): v
                                        for k, v in mappings.get('sql_types', {}).items()})

        self.loaded_from.append(str(config_file))
        logger.info(f'Loaded type mapping configuration from {config_file}')
        return True

    def get_language_type_mappings(self, provider: str) -> dict[str, str]:
        """Dotted Python type path -> SQL type string for a provider."""
        return dict(self._mappings.get(normalize_provider_name(provider), {}).get('language_types', {}))

    def get_sql_type_mappings(self, provider: str) -> dict[str, str]:
        """SQL type name -> dotted Python type path for a provider."""
        return dict(self._mappings.get(normalize_provider_name(provider), {}).get('sql_types', {}))

    def add_language_type_mapping(self, provider: str, python_type: str | type,
                                  sql_type: str) -> None:
        """Add a Python type -> SQL type mapping."""
        path = python_type if isinstance(python_type, str) else type_path(python_type)
        self._provider_mappings(provider)['language_types'][path] = sql_type

    def add_sql_type_mapping(self, provider: str, sql_type: str,
                             python_type: str | type) -> None:
        """Add a SQL type -> Python type mapping."""
        path = python_type if isinstance(python_type, str) else type_path(python_type)
        self._provider_mappings(provider)['sql_types'][sql_type.strip().lower()] = path


def type_path(python_type: type) -> str:
    return f'{python_type.__module__}.{python_type.__qualname__}'


def resolve_type_path(path: str) -> Any | None:
    """Import a dotted path such as 'decimal.Decimal' or 'builtins.str'.

    Returns None, with a warning, when the path cannot be imported.
    """
    module_name, _, attr = path.rpartition('.')
    if not module_name:
        module_name = 'builtins'
    try:
        target = importlib.import_module(module_name)
        for part in attr.split('.'):
            target = getattr(target, part)
    except (ImportError, AttributeError) as e:
        logger.warning(f'Cannot resolve configured type {path!r}: {e}')
        return None
    return target
