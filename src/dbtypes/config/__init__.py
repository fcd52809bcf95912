"""
Type mapping configuration.
"""
from dbtypes.config.type_mapping import TypeMappingConfig, resolve_type_path
from dbtypes.config.type_mapping import type_path
