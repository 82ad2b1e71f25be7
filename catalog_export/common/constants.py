"""
Shared constants for the project.

This module contains application-wide constants that should have a single source of truth.
"""

# Currency conversion rate
# USD to EUR fixed catalog rate. Not fetched live; price lists are quoted
# against this rate until the catalog is reissued.
USD_TO_EUR = 0.85

BASE_CURRENCY_SYMBOL = "$"
CONVERTED_CURRENCY_SYMBOL = "€"

# Placeholder for missing barcode/weight in exported rows
MISSING_VALUE = "N/A"

# Image fetching limits
IMAGE_FETCH_TIMEOUT = 10                  # seconds
IMAGE_MAX_BYTES = 5 * 1024 * 1024         # 5 MiB
IMAGE_FETCH_WORKERS = 4

EXPORT_FILENAME_TEMPLATE = "catalog-export-{date}.pdf"
