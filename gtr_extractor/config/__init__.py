"""
Configuration module for the extractor.

Provides:
- YAML config loading with validation
- Endpoint and category definitions
- Environment variable substitution
"""

from .loader import ConfigLoader, load_config

__all__ = ["ConfigLoader", "load_config"]
