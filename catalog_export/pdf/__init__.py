"""
PDF catalog export.

Modules:
    image_fetcher - Remote product image download and validation
    row_builder - Products to render-ready table rows
    layout - Paginated table layout with image cell stamping
    finalizer - Title block, footers and file output
"""

from .finalizer import CatalogPdfExporter, export_filename, page_label
from .image_fetcher import ImageFetcher
from .layout import (
    COLUMN_HEADERS,
    DEFAULT_GEOMETRY,
    CellRenderer,
    ImageCellRenderer,
    TableGeometry,
    TableLayoutEngine,
    paginate,
)
from .row_builder import RowBuilder, format_price

__all__ = [
    # Exporter
    'CatalogPdfExporter',
    'export_filename',
    'page_label',
    # Images
    'ImageFetcher',
    # Rows
    'RowBuilder',
    'format_price',
    # Layout
    'COLUMN_HEADERS',
    'DEFAULT_GEOMETRY',
    'CellRenderer',
    'ImageCellRenderer',
    'TableGeometry',
    'TableLayoutEngine',
    'paginate',
]
