"""Output generation for schedules (CSV, Excel, PDF)."""

from shiftplanner.output.csv_exporter import CSVExporter
from shiftplanner.output.grid import Cell, GridRow, build_grid, cell_for, export_basename
from shiftplanner.output.pdf_generator import PDFGenerator
from shiftplanner.output.xlsx_exporter import XLSXExporter

__all__ = [
    "CSVExporter",
    "Cell",
    "GridRow",
    "PDFGenerator",
    "XLSXExporter",
    "build_grid",
    "cell_for",
    "export_basename",
]
