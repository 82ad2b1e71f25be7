"""Shared test fixtures."""

from io import BytesIO

import pytest
from PIL import Image

from catalog_export.models import CatalogImage, CatalogProduct, ImagePayload
from catalog_export.pdf.image_fetcher import to_data_uri


class StaticFetcher:
    """Fetcher double that serves canned payloads and records requested URLs."""

    def __init__(self, payloads=None, default=None):
        self.payloads = payloads or {}
        self.default = default or ImagePayload.absent()
        self.requested = []

    def fetch(self, url):
        self.requested.append(url)
        return self.payloads.get(url, self.default)

    def close(self):
        pass


@pytest.fixture
def png_bytes():
    """A small valid PNG image."""
    buffer = BytesIO()
    Image.new("RGB", (8, 6), (120, 160, 110)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_payload(png_bytes):
    return ImagePayload(data_uri=to_data_uri(png_bytes, "image/png"), format_tag="PNG")


@pytest.fixture
def minimal_product():
    """Create a minimal product with only required fields."""
    return CatalogProduct(id="p-1", name="Goat Milk Soap")


@pytest.fixture
def full_product():
    """Create a fully populated product with all fields."""
    return CatalogProduct(
        id="p-2",
        name="Selene's Serenity Goat Milk Liquid Soap 500 ML",
        barcode="8680000000017",
        unit_price=10.0,
        units_per_case=12,
        weight_per_piece_kg=0.25,
        images=(
            CatalogImage(url="https://cdn.example.com/soap-back.jpg", order=2),
            CatalogImage(url="https://cdn.example.com/soap-front.jpg", order=1),
        ),
        description="Lavender scented liquid soap",
        category="Liquid Soaps",
        sort_order=1,
    )


@pytest.fixture
def make_products():
    """Factory for n simple products, each with one image URL."""
    def _make(count, with_images=True):
        return [
            CatalogProduct(
                id=f"p-{i}",
                name=f"Product {i}",
                unit_price=float(i),
                images=(CatalogImage(url=f"https://cdn.example.com/{i}.png"),) if with_images else (),
            )
            for i in range(1, count + 1)
        ]
    return _make


@pytest.fixture
def backend_record():
    """A product row as returned by the catalog backend (products + series + images)."""
    return {
        "id": "a1b2",
        "name": "Olive Oil Bar Soap",
        "barcode": "8680000000024",
        "catalog_description": "Cold pressed olive oil",
        "catalog_sort_order": 3,
        "catalog_visible": True,
        "is_active": True,
        "price_per_case": 30.0,
        "price_per_piece": 2.5,
        "price_per_piece_usd": 2.75,
        "series": {
            "name": "Bar Soaps",
            "pieces_per_case": 24,
            "net_weight_kg_per_piece": 0.15,
        },
        "product_images": [
            {"image_url": "https://cdn.example.com/bar-2.jpg", "image_order": 2},
            {"image_url": "https://cdn.example.com/bar-1.jpg", "image_order": 1},
        ],
    }
