"""
GtR Extractor - doctoral training grants from the Gateway to Research API.

Architecture:
- core/: Stable foundation (models, HTTP client, payload parsing, collection)
- navigators/: Paginated search against the GtR API 2 projects endpoint
- parsers/: Project detail enrichment from the GtR API 1 endpoint
- exporters/: CSV output per category
- config/: YAML-driven endpoint and category definitions
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
