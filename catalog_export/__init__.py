"""
Product Catalog Export Tool

Modules:
    models      - Data models (CatalogProduct, CatalogImage, ExportRow, ImagePayload)
    common      - Shared utilities (config loader, logging, constants, errors)
    catalog     - Backend record mapping and storefront filtering
    pdf         - PDF export (image fetching, row building, table layout, finalizing)
"""
