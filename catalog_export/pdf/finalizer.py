"""
Catalog PDF Exporter

Builds the complete catalog PDF: title block and metadata line, the
product table, and a footer on every page ("Page i of n"), then saves it
as catalog-export-YYYY-MM-DD.pdf.

An export either produces a complete file or raises ExportError; the
document is written to a temporary file and linked under an unused name
only once it is complete, so an earlier export is never overwritten.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional

from reportlab.lib import colors
from reportlab.pdfgen import canvas as pdf_canvas

from ..common.config_loader import ExportSettings
from ..common.constants import EXPORT_FILENAME_TEMPLATE
from ..common.errors import ExportError, ExportInProgressError
from ..models import CatalogProduct, CurrencyMode
from .image_fetcher import ImageFetcher
from .layout import DEFAULT_GEOMETRY, TableGeometry, TableLayoutEngine
from .row_builder import RowBuilder

logger = logging.getLogger(__name__)

TITLE_COLOR = colors.HexColor("#263326")
MUTED_COLOR = colors.HexColor("#6b7d6b")

TITLE_FONT_SIZE = 18
SUBTITLE_FONT_SIZE = 10
META_FONT_SIZE = 9
FOOTER_FONT_SIZE = 8
FOOTER_Y = 25


def export_filename(today: date) -> str:
    """File name for an export made on ``today``."""
    return EXPORT_FILENAME_TEMPLATE.format(date=today.isoformat())


def page_label(page_number: int, page_count: int) -> str:
    return f"Page {page_number} of {page_count}"


class CatalogPdfExporter:
    """
    Exports a filtered product list to PDF.

    One export runs at a time per exporter; a concurrent call raises
    ExportInProgressError.

    Usage:
        exporter = CatalogPdfExporter(settings=load_export_settings())
        path = exporter.export(products, CurrencyMode.BOTH, output_dir="output")
    """

    def __init__(
        self,
        fetcher=None,
        geometry: TableGeometry = DEFAULT_GEOMETRY,
        settings: Optional[ExportSettings] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize the exporter.

        Args:
            fetcher: Image fetcher (default: ImageFetcher built from settings)
            geometry: Table geometry
            settings: Document text and fetch limits
            max_workers: Concurrent image fetches (default: settings.fetch_workers)
        """
        self.settings = settings or ExportSettings()
        self.geometry = geometry
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or ImageFetcher(
            timeout=self.settings.image_timeout,
            max_bytes=self.settings.image_max_bytes,
        )
        self.row_builder = RowBuilder(self.fetcher, max_workers or self.settings.fetch_workers)
        self.engine = TableLayoutEngine(geometry)
        self._lock = threading.Lock()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        if self._owns_fetcher:
            self.fetcher.close()

    # -- drawing -------------------------------------------------------------

    def _draw_title_block(self, canvas, product_count: int, mode: CurrencyMode, today: date) -> float:
        """Draw title, subtitle and metadata line; return the table top."""
        g = self.geometry
        center = g.page_width / 2
        left = g.table_left()
        right = left + g.table_width
        y = g.page_top - TITLE_FONT_SIZE

        canvas.saveState()
        canvas.setFillColor(TITLE_COLOR)
        canvas.setFont(g.bold_font_name, TITLE_FONT_SIZE)
        canvas.drawCentredString(center, y, self.settings.title)

        y -= SUBTITLE_FONT_SIZE + 8
        canvas.setFillColor(MUTED_COLOR)
        canvas.setFont(g.font_name, SUBTITLE_FONT_SIZE)
        canvas.drawCentredString(center, y, self.settings.subtitle)

        y -= META_FONT_SIZE + 14
        canvas.setFont(g.font_name, META_FONT_SIZE)
        canvas.drawString(left, y, f"Generated: {today.isoformat()}")
        canvas.drawCentredString(center, y, f"Total products: {product_count}")
        canvas.drawRightString(right, y, mode.description)

        y -= 8
        canvas.setStrokeColor(MUTED_COLOR)
        canvas.setLineWidth(0.5)
        canvas.line(left, y, right, y)
        canvas.restoreState()

        return y - 10

    def _draw_footer(self, canvas, page_number: int, page_count: int) -> None:
        g = self.geometry
        left = g.table_left()
        right = left + g.table_width

        canvas.saveState()
        canvas.setFont(g.font_name, FOOTER_FONT_SIZE)
        canvas.setFillColor(MUTED_COLOR)
        canvas.drawString(left, FOOTER_Y, self.settings.source)
        canvas.drawCentredString(g.page_width / 2, FOOTER_Y, self.settings.reference)
        canvas.drawRightString(right, FOOTER_Y, page_label(page_number, page_count))
        canvas.restoreState()

    # -- export --------------------------------------------------------------

    def render(self, products: Iterable[CatalogProduct], mode, today: Optional[date] = None) -> bytes:
        """
        Render the catalog PDF in memory.

        Args:
            products: Filtered products in display order
            mode: CurrencyMode or its UI literal ("usd", "eur", "both")
            today: Date printed in the document (default: today)

        Returns:
            PDF bytes

        Raises:
            ExportInProgressError: If another export is running on this exporter
            ExportError: If the document could not be generated
        """
        if not self._lock.acquire(blocking=False):
            raise ExportInProgressError("A catalog export is already in progress")
        try:
            return self._render(list(products), CurrencyMode.parse(mode), today or date.today())
        finally:
            self._lock.release()

    def _render(self, products, mode: CurrencyMode, today: date) -> bytes:
        logger.info("Exporting %d products (%s)", len(products), mode.description)
        buffer = BytesIO()
        try:
            rows = self.row_builder.build_rows(products, mode)
            canvas = pdf_canvas.Canvas(buffer, pagesize=self.geometry.page_size)
            canvas.setTitle(self.settings.title)
            canvas.setAuthor(self.settings.source)
            canvas.setSubject(f"Product catalog, {today.isoformat()}")

            table_top = self._draw_title_block(canvas, len(products), mode, today)
            page_count = self.engine.render(canvas, rows, table_top, on_page_end=self._draw_footer)
            canvas.save()
        except Exception as e:
            raise ExportError(f"PDF generation failed: {e}") from e

        logger.info("Rendered %d rows on %d pages", len(rows), page_count)
        return buffer.getvalue()

    def export(
        self,
        products: Iterable[CatalogProduct],
        mode,
        output_dir: str | Path = ".",
        today: Optional[date] = None,
    ) -> Path:
        """
        Render the catalog and save it as catalog-export-YYYY-MM-DD.pdf.

        An earlier file is never replaced: re-running on the same day saves
        catalog-export-YYYY-MM-DD (1).pdf, (2) and so on.

        Returns:
            Path of the saved PDF

        Raises:
            ExportError: If rendering or saving failed (no file is left behind)
        """
        today = today or date.today()
        content = self.render(products, mode, today)

        output_dir = Path(output_dir)
        target = output_dir / export_filename(today)
        tmp_path = None
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=output_dir, prefix=".catalog-export-", suffix=".part")
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            target = _link_unused_name(tmp_path, target)
        except OSError as e:
            raise ExportError(f"Could not save {target}: {e}") from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.info("Saved %s (%d bytes)", target, len(content))
        return target


def _link_unused_name(source: str, target: Path) -> Path:
    """Hard-link source to target, or to "<stem> (n)<suffix>" if target exists."""
    candidate = target
    copy_number = 0
    while True:
        try:
            os.link(source, candidate)
            return candidate
        except FileExistsError:
            copy_number += 1
            candidate = target.with_name(f"{target.stem} ({copy_number}){target.suffix}")
