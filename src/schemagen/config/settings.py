"""Parser configuration loading and validation.

Loads YAML configuration for schema parsing with full validation.
"""
from __future__ import annotations
import os
from functools import partial
from pathlib import Path
from typing import Callable, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from schemagen.sql_schema.naming import DEFAULT_TARGET_TYPE, DEFAULT_TYPE_RULES, map_sql_type

DEFAULT_CONFIG_PATH = Path("config/schemagen.yaml")


class TypeRule(BaseModel):
    """SQL type prefixes that map to one target type."""
    prefixes: list[str] = Field(..., description="SQL type prefixes, matched case-insensitively")
    target: str = Field(..., description="Target-language type name")

    @field_validator("prefixes")
    @classmethod
    def validate_prefixes(cls, v: list[str]) -> list[str]:
        """Require at least one non-blank prefix."""
        cleaned = [p.strip().upper() for p in v if p.strip()]
        if not cleaned:
            raise ValueError("prefixes must contain at least one non-empty value")
        return cleaned


def _default_rules() -> list[TypeRule]:
    return [TypeRule(prefixes=list(prefixes), target=target) for prefixes, target in DEFAULT_TYPE_RULES]


class TypeMappingConfig(BaseModel):
    """SQL type to target-language type mapping."""
    rules: list[TypeRule] = Field(default_factory=_default_rules, description="Ordered mapping rules")
    default: str = Field(DEFAULT_TARGET_TYPE, description="Type used when no rule matches")

    def mapper(self) -> Callable[[str], str]:
        """Build a single-argument type mapping function."""
        rules = tuple((tuple(r.prefixes), r.target) for r in self.rules)
        return partial(map_sql_type, rules=rules, default=self.default)


class SchemagenConfig(BaseModel):
    """Complete parser configuration."""
    dialect: Literal["mysql", "postgres", "sqlserver", "oracle", "auto"] = Field(
        "mysql", description="Input SQL dialect; non-MySQL input is transpiled first"
    )
    strip_comments: bool = Field(True, description="Remove SQL comments before scanning")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", description="Log level")
    type_mapping: TypeMappingConfig = Field(default_factory=TypeMappingConfig)

    @field_validator("dialect", mode="before")
    @classmethod
    def normalize_dialect(cls, v):
        """Accept dialect names in any case."""
        return v.lower() if isinstance(v, str) else v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept log levels in any case."""
        return v.upper() if isinstance(v, str) else v

    @classmethod
    def from_yaml(cls, path: str | Path) -> SchemagenConfig:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated SchemagenConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the file is not valid YAML or the configuration is invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

        if not data:
            raise ValueError(f"Empty configuration file: {config_path}")

        try:
            return cls.model_validate(data)
        except Exception as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    @classmethod
    def from_env(cls, env_var: str = "SCHEMAGEN_CONFIG") -> SchemagenConfig:
        """Load configuration from path in environment variable.

        Falls back to config/schemagen.yaml, then to built-in defaults.

        Args:
            env_var: Environment variable name (default: SCHEMAGEN_CONFIG)

        Returns:
            Validated SchemagenConfig instance
        """
        config_path = os.getenv(env_var)

        if not config_path:
            if DEFAULT_CONFIG_PATH.exists():
                return cls.from_yaml(DEFAULT_CONFIG_PATH)
            return cls()

        return cls.from_yaml(config_path)


def load_config(config_path: str | Path | None = None) -> SchemagenConfig:
    """Load parser configuration from file or environment.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Validated SchemagenConfig instance

    Raises:
        FileNotFoundError: If an explicit or env-provided file is missing
        ValueError: If configuration is invalid
    """
    if config_path:
        return SchemagenConfig.from_yaml(config_path)

    return SchemagenConfig.from_env()
