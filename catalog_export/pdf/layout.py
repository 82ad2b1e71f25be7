"""
Table Layout Engine

Lays out ExportRows as a paginated table on a ReportLab canvas.

Column widths are fixed absolute values so image coordinates are
deterministic; the table is horizontally centered on the page. Rows are
never split across pages and the header row is repeated on every page.

Page cycle:
    new page -> header -> rows (until the page budget or the rows run out)
             -> page-end hook (footer) -> next page
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Callable, List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

from ..models import ExportRow

logger = logging.getLogger(__name__)

COLUMN_HEADERS = ("Image", "Product", "Barcode", "Units/Case", "Weight", "Price")
IMAGE_COLUMN = 0
NAME_COLUMN = 1

HEADER_BACKGROUND = colors.HexColor("#4f6b4f")
HEADER_TEXT = colors.white
ROW_TINT = colors.HexColor("#f2f5f0")
GRID_COLOR = colors.HexColor("#c9d4c5")
TEXT_COLOR = colors.HexColor("#263326")

ELLIPSIS = "..."


@dataclass(frozen=True)
class TableGeometry:
    """Fixed table geometry, in points."""
    column_widths: Tuple[float, ...] = (60, 190, 95, 55, 60, 90)
    max_image_edge: float = 48
    image_padding: float = 8
    min_row_height: float = 56
    header_height: float = 22
    cell_padding: float = 4
    page_size: Tuple[float, float] = A4
    top_margin: float = 40
    bottom_margin: float = 50
    font_name: str = "Helvetica"
    bold_font_name: str = "Helvetica-Bold"
    font_size: float = 8
    header_font_size: float = 9
    leading: float = 10
    max_name_lines: int = 4

    def __post_init__(self):
        if len(self.column_widths) != len(COLUMN_HEADERS):
            raise ValueError(
                f"Expected {len(COLUMN_HEADERS)} column widths, got {len(self.column_widths)}"
            )

    @property
    def table_width(self) -> float:
        return sum(self.column_widths)

    @property
    def page_width(self) -> float:
        return self.page_size[0]

    @property
    def page_height(self) -> float:
        return self.page_size[1]

    @property
    def page_top(self) -> float:
        """Y coordinate where the table starts on continuation pages."""
        return self.page_height - self.top_margin

    def table_left(self, page_width: Optional[float] = None) -> float:
        """Left edge that centers the table: (pageWidth - tableWidth) / 2."""
        width = self.page_width if page_width is None else page_width
        return (width - self.table_width) / 2

    def rows_budget(self, top: float) -> float:
        """Vertical space for rows below a header drawn at ``top``."""
        return top - self.bottom_margin - self.header_height


DEFAULT_GEOMETRY = TableGeometry()


def paginate(
    row_heights: Sequence[float],
    first_page_budget: float,
    page_budget: float,
) -> List[List[int]]:
    """
    Assign rows to pages without splitting any row.

    A row that does not fit in the remaining budget of the current page
    moves whole to the next page. A page always holds at least one row,
    so a row taller than a full page still gets placed.

    Args:
        row_heights: Height of each row, in order
        first_page_budget: Row space on page 1 (below title block and header)
        page_budget: Row space on every later page (below header)

    Returns:
        Row indices per page; always at least one (possibly empty) page
    """
    pages: List[List[int]] = [[]]
    remaining = first_page_budget

    for index, height in enumerate(row_heights):
        if pages[-1] and height > remaining:
            pages.append([])
            remaining = page_budget
        pages[-1].append(index)
        remaining -= height

    return pages


@dataclass
class LayoutPlan:
    """Row heights and page assignment for one table."""
    row_heights: List[float]
    pages: List[List[int]] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)


def fit_text(text: str, font_name: str, font_size: float, max_width: float) -> str:
    """Truncate text with an ellipsis so it fits max_width."""
    if stringWidth(text, font_name, font_size) <= max_width:
        return text
    while text and stringWidth(text + ELLIPSIS, font_name, font_size) > max_width:
        text = text[:-1]
    return text.rstrip() + ELLIPSIS


class CellRenderer:
    """
    Draws custom content into a table cell.

    Called after the cell background and border are drawn. (x, y) is the
    bottom-left corner of the cell.
    """

    def draw(self, canvas, row: ExportRow, x: float, y: float, width: float, height: float) -> bool:
        """Draw into the cell; return True if anything was drawn."""
        raise NotImplementedError


class ImageCellRenderer(CellRenderer):
    """Stamps the row's image centered in the cell, or leaves it empty."""

    def __init__(self, max_edge: float, padding: float):
        self.max_edge = max_edge
        self.padding = padding

    def image_size(self, width: float, height: float) -> float:
        """Edge of the square image box for a cell."""
        return min(width - self.padding, height - self.padding, self.max_edge)

    def draw(self, canvas, row, x, y, width, height):
        if row.image.is_absent:
            return False

        size = self.image_size(width, height)
        try:
            reader = ImageReader(BytesIO(row.image.raw_bytes()))
            width_px, height_px = reader.getSize()
            if not width_px or not height_px:
                raise ValueError("image has no pixels")
            canvas.drawImage(
                reader,
                x + (width - size) / 2,
                y + (height - size) / 2,
                width=size,
                height=size,
                preserveAspectRatio=True,
                anchor="c",
                mask="auto",
            )
        except Exception as e:
            logger.warning("Could not draw %s image for %r: %s", row.image.format_tag, row.name, e)
            return False

        return True


class TableLayoutEngine:
    """
    Paginated product table.

    Usage:
        engine = TableLayoutEngine(DEFAULT_GEOMETRY)
        pages = engine.render(canvas, rows, first_page_top=700)
    """

    def __init__(self, geometry: TableGeometry = DEFAULT_GEOMETRY, cell_renderer: Optional[CellRenderer] = None):
        self.geometry = geometry
        self.cell_renderer = cell_renderer or ImageCellRenderer(
            max_edge=geometry.max_image_edge,
            padding=geometry.image_padding,
        )

    # -- measuring -----------------------------------------------------------

    def name_lines(self, name: str) -> List[str]:
        """Wrap a product name to the Name column, truncating extra lines."""
        g = self.geometry
        max_width = g.column_widths[NAME_COLUMN] - 2 * g.cell_padding
        lines = simpleSplit(name, g.font_name, g.font_size, max_width) or [""]

        if len(lines) > g.max_name_lines:
            lines = lines[:g.max_name_lines]
            lines[-1] = fit_text(lines[-1] + ELLIPSIS, g.font_name, g.font_size, max_width)

        return lines

    def row_height(self, row: ExportRow) -> float:
        g = self.geometry
        text_height = len(self.name_lines(row.name)) * g.leading + 2 * g.cell_padding
        return max(g.min_row_height, text_height)

    def plan(self, rows: Sequence[ExportRow], first_page_top: Optional[float] = None) -> LayoutPlan:
        """
        Measure rows and assign them to pages.

        Args:
            rows: Rows in display order
            first_page_top: Y where the table starts on page 1 (default: page top)
        """
        g = self.geometry
        top = g.page_top if first_page_top is None else first_page_top
        heights = [self.row_height(row) for row in rows]
        pages = paginate(heights, g.rows_budget(top), g.rows_budget(g.page_top))
        return LayoutPlan(row_heights=heights, pages=pages)

    # -- drawing -------------------------------------------------------------

    def _draw_header(self, canvas, left: float, top: float) -> None:
        g = self.geometry
        y = top - g.header_height

        canvas.setFillColor(HEADER_BACKGROUND)
        canvas.rect(left, y, g.table_width, g.header_height, stroke=0, fill=1)

        canvas.setFont(g.bold_font_name, g.header_font_size)
        canvas.setFillColor(HEADER_TEXT)
        baseline = y + g.header_height / 2 - g.header_font_size * 0.35
        x = left
        for title, width in zip(COLUMN_HEADERS, g.column_widths):
            canvas.drawCentredString(x + width / 2, baseline, title)
            x += width

    def _draw_text_cell(self, canvas, lines: List[str], x: float, y: float, width: float,
                        height: float, align_left: bool) -> None:
        g = self.geometry
        # First baseline so the block of lines sits in the vertical middle
        baseline = y + (height + (len(lines) - 1) * g.leading) / 2 - g.font_size * 0.35

        for line in lines:
            if align_left:
                canvas.drawString(x + g.cell_padding, baseline, line)
            else:
                canvas.drawCentredString(x + width / 2, baseline, line)
            baseline -= g.leading

    def _draw_row(self, canvas, row: ExportRow, index: int, left: float, y: float, height: float) -> None:
        g = self.geometry

        if index % 2 == 1:
            canvas.setFillColor(ROW_TINT)
            canvas.rect(left, y, g.table_width, height, stroke=0, fill=1)

        canvas.setStrokeColor(GRID_COLOR)
        canvas.setLineWidth(0.5)
        canvas.setFont(g.font_name, g.font_size)

        x = left
        for column, (value, width) in enumerate(zip(row.cells(), g.column_widths)):
            canvas.rect(x, y, width, height, stroke=1, fill=0)

            if column == IMAGE_COLUMN:
                self.cell_renderer.draw(canvas, row, x, y, width, height)
            else:
                canvas.setFillColor(TEXT_COLOR)
                if column == NAME_COLUMN:
                    lines = self.name_lines(value)
                else:
                    lines = [fit_text(value, g.font_name, g.font_size, width - 2 * g.cell_padding)]
                self._draw_text_cell(canvas, lines, x, y, width, height, align_left=column == NAME_COLUMN)

            x += width

    def render(
        self,
        canvas,
        rows: Sequence[ExportRow],
        first_page_top: Optional[float] = None,
        on_page_end: Optional[Callable[[object, int, int], None]] = None,
    ) -> int:
        """
        Draw the table across as many pages as needed.

        The canvas is left on the last page (no trailing showPage) so the
        caller can finish and save it.

        Args:
            canvas: ReportLab canvas positioned on page 1
            rows: Rows in display order
            first_page_top: Y where the table starts on page 1
            on_page_end: Called as on_page_end(canvas, page_number, page_count)
                before leaving each page

        Returns:
            Number of pages drawn
        """
        g = self.geometry
        plan = self.plan(rows, first_page_top)
        left = g.table_left()

        for page_number, indices in enumerate(plan.pages, start=1):
            top = g.page_top if page_number > 1 or first_page_top is None else first_page_top

            canvas.saveState()
            self._draw_header(canvas, left, top)
            y = top - g.header_height
            for index in indices:
                height = plan.row_heights[index]
                y -= height
                self._draw_row(canvas, rows[index], index, left, y, height)
            canvas.restoreState()

            logger.debug("Page %d/%d: %d rows", page_number, plan.page_count, len(indices))

            if on_page_end is not None:
                on_page_end(canvas, page_number, plan.page_count)
            if page_number < plan.page_count:
                canvas.showPage()

        return plan.page_count
