"""
YAML configuration loader with validation.

Loads the extractor configuration from YAML files with:
- Environment variable substitution
- Schema validation
- Default values
"""

import os
import re
from pathlib import Path
from typing import Optional

import yaml
import structlog

from gtr_extractor.core.errors import ConfigError
from gtr_extractor.core.models import ApiConfig, CategoryConfig, ExtractorConfig

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILE = "gtr.yml"


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, warning and empty string if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


class ConfigLoader:
    """
    Configuration loader for the extractor.

    Loads YAML config files and validates against expected schema.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict

        Raises:
            ConfigError: If the file is missing or not valid YAML
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise ConfigError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        # Substitute environment variables
        content = substitute_env_vars(content)

        try:
            config = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {filepath}: {e}") from e

        if config is not None and not isinstance(config, dict):
            raise ConfigError(f"Top level of {filepath} must be a mapping")

        return config or {}

    def load(self, filename: str = DEFAULT_CONFIG_FILE) -> ExtractorConfig:
        """
        Load the extractor configuration.

        Args:
            filename: Config file name

        Returns:
            ExtractorConfig object
        """
        return self.parse(self.load_file(filename))

    def parse(self, data: dict) -> ExtractorConfig:
        """
        Build ExtractorConfig from a config dict.

        Raises:
            ConfigError: If required fields are missing or invalid
        """
        api_data = data.get("api") or {}
        for required in ("search_url", "detail_url"):
            if not api_data.get(required):
                raise ConfigError(f"Missing required field: api.{required}")

        defaults = ApiConfig()
        try:
            api = ApiConfig(
                search_url=str(api_data["search_url"]),
                detail_url=str(api_data["detail_url"]),
                accept_header=str(api_data.get("accept_header", defaults.accept_header)),
                page_size=int(api_data.get("page_size", defaults.page_size)),
                timeout=float(api_data.get("timeout", defaults.timeout)),
            )
            detail_concurrency = int(data.get("detail_concurrency", 1))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric setting: {e}") from e

        if not 1 <= api.page_size <= 100:
            raise ConfigError(f"api.page_size must be between 1 and 100, got {api.page_size}")
        if api.timeout <= 0:
            raise ConfigError(f"api.timeout must be positive, got {api.timeout}")
        if detail_concurrency < 1:
            raise ConfigError(f"detail_concurrency must be at least 1, got {detail_concurrency}")

        categories = [self._parse_category(c) for c in data.get("categories") or []]
        if not categories:
            raise ConfigError("No categories configured")

        config = ExtractorConfig(
            api=api,
            categories=categories,
            identifier_type=str(data.get("identifier_type", "RCUK")),
            closed_status=str(data.get("closed_status", "Closed")),
            detail_concurrency=detail_concurrency,
            output_dir=str(data.get("output_dir") or "."),
        )
        if data.get("investigator_roles"):
            config.investigator_roles = [str(r) for r in data["investigator_roles"]]

        for category in categories:
            logger.debug(
                "category_loaded",
                label=category.label,
                grant_category=category.grant_category,
                terms=len(category.search_terms),
            )

        return config

    def _parse_category(self, data: dict) -> CategoryConfig:
        """
        Parse category definition into CategoryConfig.

        Raises:
            ConfigError: If required fields missing
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Category entry must be a mapping, got {data!r}")

        for field in ("label", "search_terms"):
            if not data.get(field):
                raise ConfigError(f"Missing required field in category: {field}")

        terms = data["search_terms"]
        if isinstance(terms, str):
            terms = [terms]

        return CategoryConfig(
            label=str(data["label"]),
            search_terms=[str(t) for t in terms],
            grant_category=str(data.get("grant_category", "Training Grant")),
        )


def load_config(config_path: Optional[str] = None) -> ExtractorConfig:
    """
    Convenience function to load the extractor config.

    Args:
        config_path: Optional path to a YAML file (package gtr.yml if omitted)

    Returns:
        ExtractorConfig object
    """
    if config_path:
        config_dir = str(Path(config_path).parent)
        filename = Path(config_path).name
        loader = ConfigLoader(config_dir)
        return loader.load(filename)
    else:
        loader = ConfigLoader()
        return loader.load()
