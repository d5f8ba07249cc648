"""
Orchestrator for the extraction pipeline.

Runs three stages in strict sequence:
- Search every category (CDT, DTP)
- Fetch details for every project found
- Export one CSV per category
"""

from datetime import date
from typing import Callable, Optional

import httpx
import structlog

from .core.collection import ProjectCollection
from .core.http_client import HttpClient
from .core.models import ExtractorConfig
from .exporters.csv_writer import CsvExporter
from .navigators.search import SearchPaginator
from .parsers.project_detail import DetailEnricher

logger = structlog.get_logger(__name__)


class ExtractorPipeline:
    """
    Search, enrich and export doctoral training projects.

    A first-page search failure (SearchAbortedError) stops the run;
    every other failure is logged and the run carries on.
    """

    def __init__(
        self,
        config: ExtractorConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize pipeline.

        Args:
            config: Run configuration
            transport: Optional httpx transport for the shared client
            today: Date source for output file names
        """
        self.config = config
        self.transport = transport
        self.exporter = CsvExporter(config.output_dir, today=today)

        # Statistics
        self.stats = {
            "categories": len(config.categories),
            "pages_fetched": 0,
            "pages_failed": 0,
            "projects_found": 0,
            "details_fetched": 0,
            "details_failed": 0,
            "files_written": 0,
            "export_failures": 0,
        }
        self.output_files: dict[str, str] = {}

    async def run(self) -> dict[str, ProjectCollection]:
        """
        Run the whole pipeline.

        Returns:
            Category label -> enriched ProjectCollection

        Raises:
            SearchAbortedError: If a category's first search page fails
        """
        logger.info(
            "starting_extraction",
            categories=[c.label for c in self.config.categories],
            search_url=self.config.api.search_url,
            detail_url=self.config.api.detail_url,
            timeout=self.config.api.timeout,
        )

        results: dict[str, ProjectCollection] = {}

        async with HttpClient(
            timeout=self.config.api.timeout,
            transport=self.transport,
        ) as client:
            paginator = SearchPaginator(
                http_client=client,
                api=self.config.api,
                identifier_type=self.config.identifier_type,
                closed_status=self.config.closed_status,
            )
            try:
                for category in self.config.categories:
                    results[category.label] = await paginator.search(category)
            finally:
                self.stats["pages_fetched"] = paginator.stats["pages_fetched"]
                self.stats["pages_failed"] = paginator.stats["pages_failed"]

            for label, projects in results.items():
                logger.info("projects_retrieved", category=label, total=len(projects))
                self.stats["projects_found"] += len(projects)

            enricher = DetailEnricher(
                http_client=client,
                detail_url=self.config.api.detail_url,
                investigator_roles=self.config.investigator_roles,
                concurrency=self.config.detail_concurrency,
            )
            for projects in results.values():
                await enricher.enrich(projects)

            self.stats["details_fetched"] = enricher.stats["details_fetched"]
            self.stats["details_failed"] = enricher.stats["details_failed"]

        for label, projects in results.items():
            path = self.exporter.export(label, projects)
            if path:
                self.output_files[label] = path
                self.stats["files_written"] += 1
            else:
                self.stats["export_failures"] += 1

        logger.info("extraction_complete", **self.stats)

        return results

