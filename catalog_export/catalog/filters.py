"""
Storefront Filtering

Search and category filter state for the catalog listing. The filter is
an explicit value passed to whoever needs the filtered product list
(listing, PDF export), never ambient state.
"""

from dataclasses import dataclass
from typing import Iterable, List

from ..models import CatalogProduct

ALL_CATEGORIES = "All"


@dataclass(frozen=True)
class CatalogFilter:
    """
    Search term and category selection.

    Usage:
        catalog_filter = CatalogFilter(search_term="lavender", category="Liquid Soaps")
        visible = catalog_filter.apply(products)
    """
    search_term: str = ""
    category: str = ALL_CATEGORIES

    def matches(self, product: CatalogProduct) -> bool:
        term = self.search_term
        needle = term.lower()

        matches_search = (
            needle in product.name.lower()
            or (bool(product.description) and needle in product.description.lower())
            or (bool(product.barcode) and term in product.barcode)
        )
        matches_category = self.category == ALL_CATEGORIES or product.category == self.category

        return matches_search and matches_category

    def apply(self, products: Iterable[CatalogProduct]) -> List[CatalogProduct]:
        """Return matching products, preserving input order."""
        return [p for p in products if self.matches(p)]


def categories(products: Iterable[CatalogProduct]) -> List[str]:
    """
    List category choices for the filter dropdown.

    Returns:
        ["All", ...unique non-empty categories in first-seen order]
    """
    seen = dict.fromkeys(p.category for p in products if p.category)
    return [ALL_CATEGORIES, *seen]
