#!/usr/bin/env python3
"""
Configuration Management for Receipt Reconciler

Handles environment-based configuration with sensible defaults and validation.
Supports multiple environments (development, test, production).
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class CatalogConfig:
    """Product catalog file locations."""

    catalog_file: Path
    price_history_file: Path


@dataclass
class OutputConfig:
    """Where confirmed purchases are written."""

    output_dir: Path


@dataclass
class Config:
    """
    Main configuration class for the reconciler.

    Loads configuration from environment variables with defaults suitable for
    local use, and validates it for the selected environment.
    """

    environment: Environment
    data_dir: Path

    catalog: CatalogConfig
    output: OutputConfig

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("RECONCILER_ENV", "development"))

        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_receipt_reconciler"
            data_dir = Path(os.getenv("RECONCILER_DATA_DIR", str(default_test_dir)))
        else:
            data_dir = Path(os.getenv("RECONCILER_DATA_DIR", "./data")).expanduser().resolve()

        catalog_dir = data_dir / "catalog"

        catalog = CatalogConfig(
            catalog_file=Path(os.getenv("RECONCILER_CATALOG_FILE", str(catalog_dir / "products.json"))),
            price_history_file=Path(
                os.getenv("RECONCILER_PRICE_HISTORY_FILE", str(catalog_dir / "price_history.csv"))
            ),
        )

        output = OutputConfig(output_dir=data_dir / "purchases")

        return cls(
            environment=env,
            data_dir=data_dir,
            catalog=catalog,
            output=output,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"Unknown LOG_LEVEL: {self.log_level}")

        if self.catalog.catalog_file.exists() and not self.catalog.catalog_file.is_file():
            errors.append(f"Catalog path is not a file: {self.catalog.catalog_file}")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")
        logging.getLogger("receipt_reconciler").setLevel(logging.DEBUG if self.debug else level)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a plain dictionary for display."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if hasattr(field_value, "__dict__") and not isinstance(field_value, Enum):
                result[field_name] = {
                    nested_name: str(nested_value) if isinstance(nested_value, Path) else nested_value
                    for nested_name, nested_value in field_value.__dict__.items()
                }
            elif isinstance(field_value, Path):
                result[field_name] = str(field_value)
            elif isinstance(field_value, Enum):
                result[field_name] = field_value.value
            else:
                result[field_name] = field_value

        return result


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_environment()

        errors = _config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        _config.setup_logging()

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()
