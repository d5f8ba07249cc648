"""
CSV export of enriched projects.

Writes <category>_projects_<YYYY-MM-DD>.csv with a fixed column order.
A file with the same name (same category, same day) is overwritten; a
failed write leaves any previous file untouched.
"""

import csv
import os
from datetime import date
from pathlib import Path
from typing import Callable, Optional

import structlog

from gtr_extractor.core.collection import ProjectCollection
from gtr_extractor.core.models import CSV_COLUMNS

logger = structlog.get_logger(__name__)

# Filesystem errors, text that cannot be encoded as UTF-8 (e.g. lone
# surrogates from JSON escapes) and csv module errors.
EXPORT_ERRORS = (OSError, UnicodeError, csv.Error)


def csv_filename(category: str, on: Optional[date] = None) -> str:
    """Output file name for a category, dated today unless given."""
    on = on or date.today()
    return f"{category}_projects_{on.strftime('%Y-%m-%d')}.csv"


class CsvExporter:
    """Writes one CSV file per category into output_dir."""

    def __init__(
        self,
        output_dir: str = ".",
        today: Callable[[], date] = date.today,
    ):
        self.output_dir = Path(output_dir)
        self.today = today
        self.logger = logger.bind(exporter=self.__class__.__name__)

    def path_for(self, category: str) -> Path:
        return self.output_dir / csv_filename(category, self.today())

    def export(self, category: str, projects: ProjectCollection) -> Optional[str]:
        """
        Write the category's projects to CSV.

        Args:
            category: Category label used in the file name
            projects: Enriched projects

        Returns:
            Path to the written file, or None if writing failed
        """
        filepath = self.path_for(category)
        # Rows go to a sibling temp file that replaces the target only
        # once fully written
        tmp_path = filepath.with_name(filepath.name + ".tmp")

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
                writer.writeheader()
                for record in projects:
                    writer.writerow(record.to_row())
            os.replace(tmp_path, filepath)
        except EXPORT_ERRORS as e:
            if tmp_path.exists():
                tmp_path.unlink()
            self.logger.error(
                "csv_export_failed",
                category=category,
                path=str(filepath),
                error_type=type(e).__name__,
                error=str(e),
            )
            return None

        self.logger.info(
            "saved_csv",
            category=category,
            path=str(filepath),
            projects=len(projects),
        )
        return str(filepath)
