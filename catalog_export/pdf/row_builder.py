"""
Catalog Row Builder

Maps catalog products to render-ready ExportRows: formatted text fields
plus the product's primary image, fetched through an ImageFetcher.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, List, Optional

from ..common.constants import (
    BASE_CURRENCY_SYMBOL,
    CONVERTED_CURRENCY_SYMBOL,
    IMAGE_FETCH_WORKERS,
    MISSING_VALUE,
    USD_TO_EUR,
)
from ..models import CatalogProduct, CurrencyMode, ExportRow, ImagePayload

logger = logging.getLogger(__name__)


def format_price(base_price: Optional[float], mode: CurrencyMode) -> str:
    """
    Format a base-currency price for the given currency mode.

    Examples:
        format_price(10, CurrencyMode.BASE_ONLY)       -> "$10.00"
        format_price(10, CurrencyMode.CONVERTED_ONLY)  -> "€8.50"
        format_price(10, CurrencyMode.BOTH)            -> "$10.00 / €8.50"
        format_price(None, CurrencyMode.BASE_ONLY)     -> "$0.00"
    """
    amount = base_price or 0.0
    base_text = f"{BASE_CURRENCY_SYMBOL}{amount:.2f}"
    converted_text = f"{CONVERTED_CURRENCY_SYMBOL}{amount * USD_TO_EUR:.2f}"

    if mode is CurrencyMode.BASE_ONLY:
        return base_text
    if mode is CurrencyMode.CONVERTED_ONLY:
        return converted_text
    return f"{base_text} / {converted_text}"


def format_weight(weight_kg: Optional[float]) -> str:
    if weight_kg is None:
        return MISSING_VALUE
    return f"{weight_kg:g} kg"


def product_to_row(product: CatalogProduct, image: ImagePayload, mode: CurrencyMode) -> ExportRow:
    """Build the text fields of a row around an already-resolved image."""
    return ExportRow(
        image=image,
        name=product.name,
        barcode=product.barcode or MISSING_VALUE,
        units_per_case=str(product.units_per_case or 1),
        weight=format_weight(product.weight_per_piece_kg),
        price=format_price(product.unit_price, mode),
    )


class RowBuilder:
    """
    Builds ExportRows for a product list.

    Primary images are fetched on a bounded worker pool; rows are always
    returned in product order regardless of fetch completion order.

    Usage:
        builder = RowBuilder(ImageFetcher(), max_workers=4)
        rows = builder.build_rows(products, CurrencyMode.BOTH)
    """

    def __init__(self, fetcher, max_workers: int = IMAGE_FETCH_WORKERS):
        """
        Args:
            fetcher: Object with fetch(url) -> ImagePayload
            max_workers: Concurrent image fetches (1 = sequential)
        """
        self.fetcher = fetcher
        self.max_workers = max(1, int(max_workers))

    def _fetch_image(self, product: CatalogProduct) -> ImagePayload:
        image = product.primary_image
        if image is None:
            return ImagePayload.absent()
        try:
            return self.fetcher.fetch(image.url)
        except Exception:
            logger.exception("Image fetch failed for %r, exporting without image", product.name)
            return ImagePayload.absent()

    def fetch_images(self, products: List[CatalogProduct]) -> List[ImagePayload]:
        """Resolve the primary image of each product, in product order."""
        total = len(products)
        images = [ImagePayload.absent()] * total

        if self.max_workers == 1 or total <= 1:
            for index, product in enumerate(products):
                images[index] = self._fetch_image(product)
                logger.debug("Image %d/%d resolved for %r", index + 1, total, product.name)
            return images

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(self._fetch_image, product): index
                for index, product in enumerate(products)
            }
            for done, future in enumerate(as_completed(futures), start=1):
                index = futures[future]
                images[index] = future.result()
                logger.debug("Image %d/%d resolved for %r", done, total, products[index].name)

        return images

    def build_rows(self, products: Iterable[CatalogProduct], mode) -> List[ExportRow]:
        """
        Build one ExportRow per product.

        Args:
            products: Products in display order
            mode: CurrencyMode (or its UI literal, e.g. "both")

        Returns:
            ExportRows with the same length and order as products
        """
        products = list(products)
        mode = CurrencyMode.parse(mode)

        images = self.fetch_images(products)
        rows = [product_to_row(p, img, mode) for p, img in zip(products, images)]

        missing = sum(1 for img in images if img.is_absent)
        logger.info("Built %d rows (%d without image)", len(rows), missing)
        return rows
