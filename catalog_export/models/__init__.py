"""
Data models for catalog export.

This module contains pure data classes with no business logic.
"""

from .product import CatalogImage, CatalogProduct, CurrencyMode, ExportRow, ImagePayload

__all__ = ['CatalogImage', 'CatalogProduct', 'CurrencyMode', 'ImagePayload', 'ExportRow']
