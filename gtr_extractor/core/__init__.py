"""
Core layer - stable foundation for the extractor.

Components:
- models: ProjectRecord, ProjectDetails, SearchResultPage dataclasses
- payload: JSON payload parsers (search envelope, project detail)
- collection: Reference-keyed project collection
- http_client: Async JSON client with explicit timeout
- errors: Exception hierarchy
"""

from .models import (
    CSV_COLUMNS,
    ApiConfig,
    CategoryConfig,
    ExtractorConfig,
    Investigator,
    ProjectDetails,
    ProjectRecord,
    RawProject,
    SearchResultPage,
)
from .payload import (
    flatten_address,
    find_investigator,
    parse_project_details,
    parse_raw_project,
    parse_search_page,
)
from .collection import ProjectCollection
from .errors import ConfigError, ExtractorError, PayloadError, SearchAbortedError

__all__ = [
    "CSV_COLUMNS",
    "ApiConfig",
    "CategoryConfig",
    "ExtractorConfig",
    "Investigator",
    "ProjectDetails",
    "ProjectRecord",
    "RawProject",
    "SearchResultPage",
    "flatten_address",
    "find_investigator",
    "parse_project_details",
    "parse_raw_project",
    "parse_search_page",
    "ProjectCollection",
    "ConfigError",
    "ExtractorError",
    "PayloadError",
    "SearchAbortedError",
]
