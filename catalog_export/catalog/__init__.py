"""
Catalog data adapters.

Modules:
    records - Backend product rows to CatalogProduct
    filters - Search/category filter state
"""

from .filters import ALL_CATEGORIES, CatalogFilter, categories
from .records import load_products, product_from_record

__all__ = [
    'ALL_CATEGORIES',
    'CatalogFilter',
    'categories',
    'load_products',
    'product_from_record',
]
