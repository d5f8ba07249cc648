"""
Exporters - output phase.

- csv_writer: one dated CSV file per category
"""

from .csv_writer import CsvExporter, csv_filename

__all__ = ["CsvExporter", "csv_filename"]
