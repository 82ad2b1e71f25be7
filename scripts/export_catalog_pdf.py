#!/usr/bin/env python3
"""
Catalog PDF Export Script

Exports the product catalog (a JSON dump of the backend's product rows)
to a PDF price list with product images.

Usage:
    python3 scripts/export_catalog_pdf.py --products data/products.json
    python3 scripts/export_catalog_pdf.py --products data/products.json --currency both
    python3 scripts/export_catalog_pdf.py --products data/products.json --search lavender --category "Liquid Soaps"
    python3 scripts/export_catalog_pdf.py --products data/products.json --workers 1 --output-dir output/pdf

Environment (.env):
    CATALOG_EXPORT_OUTPUT_DIR   Default output directory (default: output)
"""

import argparse
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from catalog_export.catalog import ALL_CATEGORIES, CatalogFilter, load_products
from catalog_export.common import ExportError, load_export_settings, setup_logging
from catalog_export.models import CurrencyMode
from catalog_export.pdf import CatalogPdfExporter

load_dotenv()

logger = logging.getLogger("catalog_export.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Export the filtered product catalog to PDF"
    )
    parser.add_argument(
        "--products", "-p",
        required=True,
        help="JSON file with product rows"
    )
    parser.add_argument(
        "--currency", "-c",
        default="usd",
        choices=[mode.value for mode in CurrencyMode],
        help="Prices to show: usd, eur or both (default: usd)"
    )
    parser.add_argument(
        "--search", "-s",
        default="",
        help="Only export products whose name, description or barcode matches"
    )
    parser.add_argument(
        "--category",
        default=ALL_CATEGORIES,
        help=f"Only export one category/series (default: {ALL_CATEGORIES})"
    )
    parser.add_argument(
        "--output-dir", "-o",
        default=os.getenv("CATALOG_EXPORT_OUTPUT_DIR", "output"),
        help="Directory for the PDF (default: $CATALOG_EXPORT_OUTPUT_DIR or output)"
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        help="Concurrent image downloads (default: from config/export.yaml)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress info messages, show only warnings and errors"
    )
    parser.add_argument(
        "--log-file",
        help="Also append timestamped log messages to this file"
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    if not os.path.exists(args.products):
        logger.error("Products file not found: %s", args.products)
        return 1

    products = load_products(args.products)
    catalog_filter = CatalogFilter(search_term=args.search, category=args.category)
    selected = catalog_filter.apply(products)

    if not selected:
        logger.warning("No products match the current filter; exporting an empty catalog")

    settings = load_export_settings()

    with CatalogPdfExporter(settings=settings, max_workers=args.workers) as exporter:
        try:
            path = exporter.export(selected, args.currency, output_dir=args.output_dir)
        except ExportError as e:
            logger.error("Export failed: %s", e)
            return 1

    print(f"Exported {len(selected)} of {len(products)} products to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
