"""maintreport.spreadsheet – tabular import normalizer and export serializer."""

from .xlsx_export import (
    SpreadsheetFile,
    build_template_xlsx,
    export_reports_xlsx,
    export_rows,
)
from .xlsx_import import (
    drop_template_example_row,
    iter_imported_reports,
    parse_reports_from_xlsx,
)

__all__ = [
    "SpreadsheetFile",
    "build_template_xlsx",
    "drop_template_example_row",
    "export_reports_xlsx",
    "export_rows",
    "iter_imported_reports",
    "parse_reports_from_xlsx",
]
