"""
Parsers - extraction phase.

- project_detail: per-project enrichment from the GtR detail endpoint
"""

from .project_detail import DetailEnricher, build_detail_url

__all__ = ["DetailEnricher", "build_detail_url"]
