"""Configuration management for schemagen."""
from .settings import (
    SchemagenConfig,
    TypeMappingConfig,
    TypeRule,
    load_config,
)

__all__ = [
    "SchemagenConfig",
    "TypeMappingConfig",
    "TypeRule",
    "load_config",
]
