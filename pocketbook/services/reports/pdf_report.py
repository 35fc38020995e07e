"""
Financial Report Exporter

Renders the transaction list and its totals as a paginated document.

Layout (A4, positions in millimetres from the top-left corner):
- First page: title at 20, "Generated on" at 30, "Transactions" at 45,
  transaction lines from 55 every 10
- Continuation pages: transaction lines from 20 every 10
- Each line: date (x=20), category (x=50), description (x=90),
  signed amount (x=170)
- After the last line: Total Income, Total Expenses, Balance

Building the report (`build_report`) is a pure fold over the list;
drawing it (`PdfReportRenderer`) rasterizes each page with Pillow and
stores the pages as one multi-page PDF.
"""

from datetime import date
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional

from PIL import Image, ImageDraw, ImageFont
from pydantic import BaseModel, Field

from pocketbook.config import ReportSettings, get_settings
from pocketbook.models.finance import FinancialSummary, Transaction
from pocketbook.queries.ledger import summarize


REPORT_TITLE = "Financial Report"
SECTION_TITLE = "Transactions"

PAGE_SIZE_MM = (210, 297)
MM_PER_INCH = 25.4
POINTS_PER_INCH = 72

FIRST_LINE_Y = 55
CONTINUATION_LINE_Y = 20
LINE_STEP = 10
COLUMNS_X = (20, 50, 90, 170)
BOTTOM_Y = 280

MAX_CATEGORY_CHARS = 18
MAX_DESCRIPTION_CHARS = 38


# =============================================================================
# REPORT MODEL
# =============================================================================

class ReportLine(BaseModel):
    """One transaction as printed."""

    date_text: str
    category: str
    description: str
    amount_text: str

    def as_text(self) -> str:
        return f"{self.date_text:<12}{self.category:<20}{self.description:<40}{self.amount_text:>12}"


class ReportPage(BaseModel):
    number: int = Field(ge=1)
    lines: list[ReportLine] = Field(default_factory=list)


class FinancialReport(BaseModel):
    """
    A laid-out report, independent of the output format.
    """

    title: str = REPORT_TITLE
    generated_on: date
    currency_symbol: str = "$"
    pages: list[ReportPage] = Field(default_factory=list)
    summary: FinancialSummary

    @property
    def transaction_count(self) -> int:
        return sum(len(page.lines) for page in self.pages)

    def format_money(self, amount: Decimal) -> str:
        sign = "-" if amount < 0 else ""
        return f"{sign}{self.currency_symbol}{abs(amount):.2f}"

    def summary_lines(self) -> list[str]:
        return [
            f"Total Income: {self.format_money(self.summary.total_income)}",
            f"Total Expenses: {self.format_money(self.summary.total_expenses)}",
            f"Balance: {self.format_money(self.summary.balance)}",
        ]

    def to_text(self) -> str:
        """Plain-text rendition; pages are separated by form feeds."""
        chunks = []
        for page in self.pages:
            lines = []
            if page.number == 1:
                lines += [
                    self.title,
                    f"Generated on: {_format_date(self.generated_on)}",
                    "",
                    SECTION_TITLE,
                ]
            lines += [line.as_text() for line in page.lines]
            chunks.append("\n".join(lines))
        chunks[-1] += "\n\n" + "\n".join(self.summary_lines())
        return "\f".join(chunks) + "\n"


def _format_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit - 3] + "..."


def build_report(
    transactions: Iterable[Transaction],
    generated_on: Optional[date] = None,
    settings: Optional[ReportSettings] = None,
) -> FinancialReport:
    """
    Lay out the transactions into pages, in list order.

    An empty list still yields one page and a zero summary.
    """
    settings = settings or get_settings().report
    transactions = list(transactions)
    symbol = settings.currency_symbol

    lines = []
    for transaction in transactions:
        sign = "+" if transaction.is_income else "-"
        lines.append(ReportLine(
            date_text=_format_date(transaction.date),
            category=transaction.category.value,
            description=transaction.description,
            amount_text=f"{sign}{symbol}{transaction.amount:.2f}",
        ))

    pages = [ReportPage(number=1, lines=lines[:settings.first_page_lines])]
    rest = lines[settings.first_page_lines:]
    while rest:
        pages.append(ReportPage(number=len(pages) + 1, lines=rest[:settings.page_lines]))
        rest = rest[settings.page_lines:]

    return FinancialReport(
        generated_on=generated_on or date.today(),
        currency_symbol=symbol,
        pages=pages,
        summary=summarize(transactions),
    )


# =============================================================================
# PDF RENDERING
# =============================================================================

class PdfReportRenderer:
    """
    Draws a FinancialReport onto A4 pages and saves them as a PDF.
    """

    def __init__(self, settings: Optional[ReportSettings] = None):
        self._settings = settings or get_settings().report
        self._dpi = self._settings.dpi
        self._fonts: dict[int, ImageFont.ImageFont] = {}

    def _mm(self, value: float) -> int:
        return round(value * self._dpi / MM_PER_INCH)

    def _font(self, points: int):
        if points not in self._fonts:
            pixels = round(points * self._dpi / POINTS_PER_INCH)
            self._fonts[points] = ImageFont.load_default(size=pixels)
        return self._fonts[points]

    def _text(self, draw: ImageDraw.ImageDraw, x_mm: float, y_mm: float, text: str, points: int) -> None:
        # Coordinates name the baseline; Pillow draws from the top edge
        font = self._font(points)
        top = self._mm(y_mm) - round(points * self._dpi / POINTS_PER_INCH)
        draw.text((self._mm(x_mm), top), text, fill="black", font=font)

    def _new_page(self) -> tuple[Image.Image, ImageDraw.ImageDraw]:
        size = (self._mm(PAGE_SIZE_MM[0]), self._mm(PAGE_SIZE_MM[1]))
        image = Image.new("RGB", size, "white")
        return image, ImageDraw.Draw(image)

    def render(self, report: FinancialReport) -> bytes:
        """Render every page and return the PDF bytes."""
        images = []
        y = FIRST_LINE_Y
        draw = None

        for page in report.pages:
            image, draw = self._new_page()
            images.append(image)
            if page.number == 1:
                self._text(draw, 20, 20, report.title, 20)
                self._text(draw, 20, 30, f"Generated on: {_format_date(report.generated_on)}", 12)
                self._text(draw, 20, 45, SECTION_TITLE, 14)
                y = FIRST_LINE_Y
            else:
                y = CONTINUATION_LINE_Y

            for line in page.lines:
                columns = (
                    line.date_text,
                    _truncate(line.category, MAX_CATEGORY_CHARS),
                    _truncate(line.description, MAX_DESCRIPTION_CHARS),
                    line.amount_text,
                )
                for x, text in zip(COLUMNS_X, columns):
                    self._text(draw, x, y, text, 10)
                y += LINE_STEP

        y += LINE_STEP
        summary = report.summary_lines()
        if y + LINE_STEP * (len(summary) - 1) > BOTTOM_Y:
            image, draw = self._new_page()
            images.append(image)
            y = CONTINUATION_LINE_Y
        for offset, text in enumerate(summary):
            self._text(draw, 20, y + offset * LINE_STEP, text, 12)

        buffer = BytesIO()
        images[0].save(
            buffer,
            format="PDF",
            save_all=True,
            append_images=images[1:],
            resolution=float(self._dpi),
            title=report.title,
        )
        return buffer.getvalue()


def render_pdf(report: FinancialReport, settings: Optional[ReportSettings] = None) -> bytes:
    return PdfReportRenderer(settings).render(report)


def export_pdf(
    transactions: Iterable[Transaction],
    path: Path,
    generated_on: Optional[date] = None,
    settings: Optional[ReportSettings] = None,
) -> FinancialReport:
    """Build the report, render it and write it to `path`."""
    report = build_report(transactions, generated_on=generated_on, settings=settings)
    Path(path).write_bytes(render_pdf(report, settings))
    return report
