"""
Product data models.

Pure data classes for representing catalog products and the render-ready
rows derived from them. No business logic - only data structure definitions
and small accessors.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class CatalogImage:
    """Product image reference with its display order."""
    url: str
    order: int = 0


@dataclass(frozen=True)
class CatalogProduct:
    """
    Immutable view of a catalog product, as consumed by the PDF export.

    Field Groups:
    - Core fields: identifier and display name
    - Pricing: unit price in the base currency (USD)
    - Packaging: units per case and net weight per piece
    - Images: ordered image references
    - Storefront: description, category (series name) and sort order,
      used by search/filtering only
    """

    # Core fields (required)
    id: str
    name: str

    barcode: Optional[str] = None
    unit_price: Optional[float] = None      # Price per piece in USD
    units_per_case: Optional[int] = None
    weight_per_piece_kg: Optional[float] = None
    images: Tuple[CatalogImage, ...] = field(default_factory=tuple)

    # Storefront fields
    description: str = ""
    category: str = ""
    sort_order: Optional[int] = None

    def __post_init__(self):
        """Validate required fields after initialization."""
        if not self.name:
            raise ValueError("Product name is required")
        if self.unit_price is not None and self.unit_price < 0:
            raise ValueError(f"Product price must be non-negative (got {self.unit_price})")

    @property
    def primary_image(self) -> Optional[CatalogImage]:
        """First image by order index, or None when the product has no images."""
        if not self.images:
            return None
        return min(self.images, key=lambda img: img.order)


class CurrencyMode(Enum):
    """Which price string(s) are rendered for each product."""

    BASE_ONLY = "usd"
    CONVERTED_ONLY = "eur"
    BOTH = "both"

    @classmethod
    def parse(cls, value) -> "CurrencyMode":
        """
        Resolve a UI literal ("usd", "eur", "both") or generic name
        ("base", "converted", "both") to a CurrencyMode.

        Raises:
            ValueError: If the value names no known mode
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        aliases = {
            "usd": cls.BASE_ONLY,
            "base": cls.BASE_ONLY,
            "base_only": cls.BASE_ONLY,
            "eur": cls.CONVERTED_ONLY,
            "converted": cls.CONVERTED_ONLY,
            "converted_only": cls.CONVERTED_ONLY,
            "both": cls.BOTH,
        }
        if key not in aliases:
            raise ValueError(f"Unknown currency mode: {value!r}")
        return aliases[key]

    @property
    def description(self) -> str:
        return {
            CurrencyMode.BASE_ONLY: "Prices in USD",
            CurrencyMode.CONVERTED_ONLY: "Prices in EUR",
            CurrencyMode.BOTH: "Prices in USD / EUR",
        }[self]


@dataclass(frozen=True)
class ImagePayload:
    """
    Decoded image ready for embedding, or the absent marker.

    data_uri holds a self-describing base64 data URI
    (``data:image/png;base64,...``); format_tag is one of PNG, JPEG, WEBP.
    """
    data_uri: Optional[str] = None
    format_tag: Optional[str] = None

    @classmethod
    def absent(cls) -> "ImagePayload":
        return cls()

    @property
    def is_absent(self) -> bool:
        return not self.data_uri

    def raw_bytes(self) -> bytes:
        """Decode the data URI back to the original image bytes."""
        if self.is_absent:
            raise ValueError("Absent image has no content")
        _, _, encoded = self.data_uri.partition(",")
        return base64.b64decode(encoded, validate=True)


@dataclass(frozen=True)
class ExportRow:
    """One render-ready table row, derived from a CatalogProduct."""
    image: ImagePayload
    name: str
    barcode: str
    units_per_case: str
    weight: str
    price: str

    def cells(self) -> Tuple[ImagePayload, str, str, str, str, str]:
        """Cell values in table column order."""
        return (self.image, self.name, self.barcode, self.units_per_case, self.weight, self.price)
