"""Export-Modul: CSV und Excel (openpyxl) für die Platzvergabe."""

from export.csv_export import CsvExporter
from export.excel_export import ExcelExporter

__all__ = ["CsvExporter", "ExcelExporter"]
