"""
Project detail enrichment from GtR API 1.

Extraction phase of the pipeline: for every project reference found by
the search, fetches projects.json?ref=<reference> and attaches lead
organisation, funding and grant holder details to the record.
"""

import asyncio
from typing import Iterable, Optional
from urllib.parse import quote

import structlog

from gtr_extractor.core.collection import ProjectCollection
from gtr_extractor.core.errors import PayloadError
from gtr_extractor.core.http_client import FETCH_ERRORS, HttpClient
from gtr_extractor.core.models import ProjectDetails, ProjectRecord
from gtr_extractor.core.payload import parse_project_details

logger = structlog.get_logger(__name__)

DETAIL_ERRORS = FETCH_ERRORS + (PayloadError,)


def build_detail_url(base_url: str, reference: str) -> str:
    """Detail endpoint URL for one project reference."""
    return f"{base_url}?ref={quote(reference, safe='/')}"


class DetailEnricher:
    """
    Fetches and merges project details for a whole collection.

    Failures are per project: the record keeps its basic fields and the
    run goes on. With concurrency=1 requests are strictly sequential.
    """

    def __init__(
        self,
        http_client: HttpClient,
        detail_url: str,
        investigator_roles: Iterable[str] = ("TRAINING_GRANT_HOLDER", "PRINCIPAL_INVESTIGATOR"),
        concurrency: int = 1,
    ):
        """
        Initialize enricher.

        Args:
            http_client: Shared HTTP client (already entered)
            detail_url: Base detail endpoint
            investigator_roles: Role tags identifying the grant holder
            concurrency: Maximum detail requests in flight
        """
        self.http_client = http_client
        self.detail_url = detail_url
        self.investigator_roles = tuple(investigator_roles)
        self.concurrency = max(1, concurrency)
        self.logger = logger.bind(parser=self.__class__.__name__)

        self.stats = {
            "details_fetched": 0,
            "details_failed": 0,
        }

    async def fetch_details(self, reference: str) -> ProjectDetails:
        """
        Fetch and parse details for one project.

        Raises:
            httpx.HTTPError, json.JSONDecodeError, PayloadError
        """
        url = build_detail_url(self.detail_url, reference)
        data = await self.http_client.get_json(url)
        return parse_project_details(data, self.investigator_roles)

    async def enrich_record(self, record: ProjectRecord) -> Optional[ProjectRecord]:
        """
        Enrich a single record.

        Args:
            record: Basic record from the search phase

        Returns:
            Enriched copy, or None if the details could not be fetched
        """
        url = build_detail_url(self.detail_url, record.reference)
        self.logger.info(
            "retrieving_project_details",
            reference=record.reference,
            url=url,
        )

        try:
            details = await self.fetch_details(record.reference)
        except DETAIL_ERRORS as e:
            self.stats["details_failed"] += 1
            self.logger.error(
                "project_detail_failed",
                reference=record.reference,
                url=url,
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        self.stats["details_fetched"] += 1
        enriched = record.with_details(details)

        self.logger.debug("project_details_extracted", **enriched.to_dict())
        return enriched

    async def enrich(self, projects: ProjectCollection) -> ProjectCollection:
        """
        Enrich every record of a collection in place.

        Records whose fetch fails keep their basic fields.

        Args:
            projects: Collection from the search phase

        Returns:
            The same collection, enriched records swapped in
        """
        self.logger.info(
            "enriching_projects",
            category=projects.category,
            projects=len(projects),
            concurrency=self.concurrency,
        )

        if self.concurrency == 1:
            for reference in projects.references():
                enriched = await self.enrich_record(projects.get(reference))
                if enriched:
                    projects.replace(enriched)
            return projects

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(record: ProjectRecord) -> Optional[ProjectRecord]:
            async with semaphore:
                return await self.enrich_record(record)

        tasks = [asyncio.create_task(bounded(record)) for record in projects]
        try:
            results = await asyncio.gather(*tasks)
        finally:
            # No request may outlive this call: the caller closes the
            # shared client right after
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.wait(pending)

        for enriched in results:
            if enriched:
                projects.replace(enriched)

        return projects
