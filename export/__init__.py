"""Export-Modul: Excel (openpyxl) für den Semesterplan."""

from export.excel_export import ExcelExporter

__all__ = ["ExcelExporter"]
