import pathlib
import site

import pytest
from dbtypes.cache import Cache
from dbtypes.config import TypeMappingConfig
from dbtypes.providers import reset_type_maps

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear all caches before and after each test to ensure test isolation."""
    Cache.get_instance().clear_all()
    yield
    Cache.get_instance().clear_all()


@pytest.fixture(autouse=True)
def isolated_type_maps(tmp_path):
    """Start every test with empty custom mappings and fresh shared type maps.

    Custom mapping files in the user's home or /etc must not leak into tests.
    """
    empty = tmp_path / 'empty_type_mapping.json'
    empty.write_text('{}')
    TypeMappingConfig._instance = TypeMappingConfig(str(empty))
    reset_type_maps()
    yield
    reset_type_maps()
    TypeMappingConfig.reset_instance()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.type_maps',
]
