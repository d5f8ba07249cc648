"""
Navigators - discovery phase.

- search: paginated keyword search over the GtR projects endpoint
"""

from .search import SearchPaginator, build_search_url, filter_projects

__all__ = ["SearchPaginator", "build_search_url", "filter_projects"]
