"""
Paginated project search against GtR API 2.

Discovery phase of the pipeline: runs the keyword search for one
category, walks every result page and keeps the active projects of the
target grant category.
"""

from typing import Iterable, Optional
from urllib.parse import quote

import structlog

from gtr_extractor.core.collection import ProjectCollection
from gtr_extractor.core.errors import PayloadError, SearchAbortedError
from gtr_extractor.core.http_client import FETCH_ERRORS, HttpClient
from gtr_extractor.core.models import (
    ApiConfig,
    CategoryConfig,
    ProjectRecord,
    RawProject,
    SearchResultPage,
)
from gtr_extractor.core.payload import parse_search_page

logger = structlog.get_logger(__name__)

PAGE_ERRORS = FETCH_ERRORS + (PayloadError,)


def build_search_url(
    base_url: str,
    terms: Iterable[str],
    page_size: int,
    page: Optional[int] = None,
) -> str:
    """
    Build a projects search URL.

    Each term is percent-encoded on its own and the terms are joined
    with "+", which the API reads as "any of".

    Example:
        build_search_url(url, ["dtp", '"doctoral training partnership"'], 100)
        -> url + '?s=100&q=dtp+%22doctoral%20training%20partnership%22'

    Args:
        base_url: Projects endpoint
        terms: Search terms (quoted phrases allowed)
        page_size: Results per page
        page: Page number; omitted from the URL for the first page

    Returns:
        Full URL
    """
    query = "+".join(quote(term, safe="") for term in terms)
    url = f"{base_url}?s={page_size}&q={query}"
    if page is not None and page > 1:
        url += f"&p={page}"
    return url


def filter_projects(
    projects: Iterable[RawProject],
    category: CategoryConfig,
    identifier_type: str = "RCUK",
    closed_status: str = "Closed",
) -> ProjectCollection:
    """
    Keep active projects of the target grant category.

    A project is dropped if it has no identifier of identifier_type, if
    its grant category differs from category.grant_category, or if its
    status equals closed_status (case-insensitive).

    Args:
        projects: Parsed search hits
        category: Category being searched
        identifier_type: Identifier tag holding the project reference
        closed_status: Status marking a finished project

    Returns:
        ProjectCollection of basic ProjectRecords
    """
    collection = ProjectCollection(category.label)
    closed = closed_status.casefold()

    for project in projects:
        reference = project.identifier_of_type(identifier_type)
        if reference is None:
            continue
        if project.grant_category != category.grant_category:
            continue
        if project.status is not None and project.status.casefold() == closed:
            continue

        collection.add(
            ProjectRecord(
                reference=reference,
                title=project.title,
                gtr_id=project.gtr_id,
                category=category.label,
                grant_category=project.grant_category,
            )
        )

    return collection


class SearchPaginator:
    """
    Walks all result pages of a category search.

    The first request is mandatory: it carries the page count. A failure
    there raises SearchAbortedError. Failures on later pages are logged
    and the page is skipped.
    """

    def __init__(
        self,
        http_client: HttpClient,
        api: ApiConfig,
        identifier_type: str = "RCUK",
        closed_status: str = "Closed",
    ):
        """
        Initialize paginator.

        Args:
            http_client: Shared HTTP client (already entered)
            api: Endpoint settings
            identifier_type: Identifier tag holding the project reference
            closed_status: Status marking a finished project
        """
        self.http_client = http_client
        self.api = api
        self.identifier_type = identifier_type
        self.closed_status = closed_status
        self.logger = logger.bind(navigator=self.__class__.__name__)

        self.stats = {
            "pages_fetched": 0,
            "pages_failed": 0,
        }

    @property
    def headers(self) -> dict[str, str]:
        return {"Accept": self.api.accept_header}

    async def search(self, category: CategoryConfig) -> ProjectCollection:
        """
        Collect every matching project for a category.

        Args:
            category: Category with search terms and grant category filter

        Returns:
            ProjectCollection keyed by project reference

        Raises:
            SearchAbortedError: If the first result page cannot be fetched
        """
        search_url = build_search_url(
            self.api.search_url,
            category.search_terms,
            self.api.page_size,
        )
        log = self.logger.bind(category=category.label)
        log.info("searching_projects", url=search_url)

        try:
            first = await self._fetch_page(search_url, first=True)
        except PAGE_ERRORS as e:
            log.error(
                "search_failed",
                url=search_url,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise SearchAbortedError(search_url, e) from e

        log.info(
            "search_result_stats",
            total_pages=first.total_pages,
            total_results=first.total_size,
        )
        log.info("retrieving_page", page=first.page, size=first.size)

        projects = self._filter(first, category)

        for page_number in self._remaining_pages(first, log):
            paged_url = build_search_url(
                self.api.search_url,
                category.search_terms,
                self.api.page_size,
                page=page_number,
            )
            log.info("querying_page", url=paged_url, page=page_number)

            try:
                page = await self._fetch_page(paged_url)
            except PAGE_ERRORS as e:
                self.stats["pages_failed"] += 1
                log.error(
                    "search_page_failed",
                    url=paged_url,
                    page=page_number,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                continue

            log.info("retrieving_page", page=page_number, size=page.size)
            projects.merge(self._filter(page, category))

        log.info("search_complete", projects=len(projects))
        return projects

    async def _fetch_page(self, url: str, first: bool = False) -> SearchResultPage:
        data = await self.http_client.get_json(url, headers=self.headers)
        page = parse_search_page(data, require_total_pages=first)
        self.stats["pages_fetched"] += 1
        return page

    def _filter(self, page: SearchResultPage, category: CategoryConfig) -> ProjectCollection:
        return filter_projects(
            page.projects,
            category,
            identifier_type=self.identifier_type,
            closed_status=self.closed_status,
        )

    def _remaining_pages(self, first: SearchResultPage, log) -> list[int]:
        """
        Page numbers still to request after the first response.

        The first request carries no page parameter, so the API should
        answer with page 1. If it reports another page, that page is
        treated as already held and every other page is requested.
        """
        if first.page != 1:
            log.warning(
                "unexpected_first_page",
                reported_page=first.page,
                total_pages=first.total_pages,
            )
        return [p for p in range(2, first.total_pages + 1) if p != first.page]
