"""
Backend Record Mapping

Converts product rows from the catalog backend into CatalogProduct views.

Two row shapes are accepted:
- Backend shape: ``products`` row joined with its ``series`` row and
  ``product_images`` rows (price_per_piece_usd, series.pieces_per_case, ...)
- Generic shape: unitPrice, unitsPerCase, weightPerPieceKg, images[{url, order}]
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models import CatalogImage, CatalogProduct

logger = logging.getLogger(__name__)


def _first_present(*values):
    """Return the first value that is not None/empty, else None."""
    for value in values:
        if value not in (None, ""):
            return value
    return None


def _to_float(value) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric value: %r", value)
        return None


def _to_int(value) -> Optional[int]:
    number = _to_float(value)
    return int(number) if number is not None else None


def _order(value, position: int) -> int:
    order = _to_int(value)
    return position if order is None else order


def _parse_images(record: Dict[str, Any]) -> tuple[CatalogImage, ...]:
    images: list[CatalogImage] = []

    for position, raw in enumerate(record.get('product_images') or []):
        url = raw.get('image_url')
        if url:
            images.append(CatalogImage(url=url, order=_order(raw.get('image_order'), position)))

    for position, raw in enumerate(record.get('images') or []):
        if isinstance(raw, str):
            images.append(CatalogImage(url=raw, order=position))
        elif raw.get('url'):
            images.append(CatalogImage(url=raw['url'], order=_order(raw.get('order'), position)))

    return tuple(sorted(images, key=lambda img: img.order))


def product_from_record(record: Dict[str, Any]) -> CatalogProduct:
    """
    Build a CatalogProduct from one backend row.

    Args:
        record: Product row (backend or generic shape)

    Returns:
        CatalogProduct with missing optional fields left as None

    Raises:
        ValueError: If the row has no name or a negative price
    """
    series = record.get('series') or {}

    # USD price is preferred; price_per_piece is the legacy base price column
    unit_price = _to_float(_first_present(
        record.get('unitPrice'),
        record.get('price_per_piece_usd') or None,
        record.get('price_per_piece'),
    ))

    return CatalogProduct(
        id=str(record.get('id') or ''),
        name=(record.get('name') or '').strip(),
        barcode=_first_present(record.get('barcode')),
        unit_price=unit_price,
        units_per_case=_to_int(_first_present(
            record.get('unitsPerCase'),
            series.get('pieces_per_case'),
        )),
        weight_per_piece_kg=_to_float(_first_present(
            record.get('weightPerPieceKg'),
            series.get('net_weight_kg_per_piece'),
        )),
        images=_parse_images(record),
        description=record.get('catalog_description') or record.get('description') or '',
        category=series.get('name') or record.get('category') or '',
        sort_order=_to_int(record.get('catalog_sort_order')),
    )


def _is_listed(record: Dict[str, Any]) -> bool:
    """Rows explicitly marked inactive or hidden are not part of the catalog."""
    return record.get('is_active') is not False and record.get('catalog_visible') is not False


def load_products(path: str | Path) -> List[CatalogProduct]:
    """
    Load catalog products from a JSON export of the backend.

    The file holds either a list of rows or ``{"products": [...]}``.
    Inactive/hidden rows are dropped and the rest ordered by
    catalog_sort_order (rows without one keep their file order, last).

    Args:
        path: Path to JSON file

    Returns:
        List of CatalogProduct in catalog order
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('products', [])

    records = [r for r in data if _is_listed(r)]
    skipped = len(data) - len(records)
    if skipped:
        logger.info("Skipped %d inactive or hidden products", skipped)

    products = [product_from_record(r) for r in records]
    products.sort(key=lambda p: (p.sort_order is None, p.sort_order or 0))

    logger.info("Loaded %d products from %s", len(products), path)
    return products
