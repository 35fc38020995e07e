"""Report export package."""

from pocketbook.services.reports.pdf_report import (
    FinancialReport,
    PdfReportRenderer,
    ReportLine,
    ReportPage,
    build_report,
    export_pdf,
    render_pdf,
)

__all__ = [
    "FinancialReport",
    "PdfReportRenderer",
    "ReportLine",
    "ReportPage",
    "build_report",
    "export_pdf",
    "render_pdf",
]
