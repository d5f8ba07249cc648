"""
Project collection keyed by RCUK project reference.

Deduplication is by reference only: adding a record whose reference is
already present replaces the earlier one.
"""

from typing import Iterator, Optional

import structlog

from .models import ProjectRecord

logger = structlog.get_logger(__name__)


class ProjectCollection:
    """
    Reference -> ProjectRecord mapping for one category.

    Records are immutable; enrichment swaps in a new record via replace().
    """

    def __init__(self, category: str = ""):
        """
        Initialize an empty collection.

        Args:
            category: Category label the records belong to (CDT, DTP)
        """
        self.category = category
        self._records: dict[str, ProjectRecord] = {}

    def add(self, record: ProjectRecord) -> bool:
        """
        Add record, overwriting any record with the same reference.

        Returns:
            True if the reference was new
        """
        is_new = record.reference not in self._records
        if not is_new:
            logger.debug(
                "project_overwritten",
                category=self.category,
                reference=record.reference,
            )
        self._records[record.reference] = record
        return is_new

    def merge(self, other: "ProjectCollection") -> None:
        """Add every record of other; other wins on equal references."""
        for record in other:
            self.add(record)

    def replace(self, record: ProjectRecord) -> None:
        """
        Swap in an updated version of a record already held.

        Raises:
            KeyError: If the reference is unknown
        """
        if record.reference not in self._records:
            raise KeyError(record.reference)
        self._records[record.reference] = record

    def get(self, reference: str) -> Optional[ProjectRecord]:
        return self._records.get(reference)

    def references(self) -> list[str]:
        """Snapshot of references, safe to iterate while replacing."""
        return list(self._records)

    def __contains__(self, reference: object) -> bool:
        return reference in self._records

    def __iter__(self) -> Iterator[ProjectRecord]:
        return iter(list(self._records.values()))

    def __len__(self) -> int:
        """Return number of unique projects."""
        return len(self._records)
