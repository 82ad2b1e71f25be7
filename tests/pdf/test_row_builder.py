"""Tests for catalog_export/pdf/row_builder.py"""

import threading
import time

import pytest

from catalog_export.models import CatalogImage, CatalogProduct, CurrencyMode, ImagePayload
from catalog_export.pdf.row_builder import RowBuilder, format_price, format_weight
from conftest import StaticFetcher


class TestFormatPrice:
    def test_base_only(self):
        assert format_price(10, CurrencyMode.BASE_ONLY) == "$10.00"

    def test_converted_only(self):
        assert format_price(10, CurrencyMode.CONVERTED_ONLY) == "€8.50"

    def test_both(self):
        assert format_price(10.0, CurrencyMode.BOTH) == "$10.00 / €8.50"

    def test_absent_price_is_zero(self):
        assert format_price(None, CurrencyMode.BASE_ONLY) == "$0.00"
        assert format_price(None, CurrencyMode.BOTH) == "$0.00 / €0.00"

    def test_rounds_to_two_places(self):
        assert format_price(3.425, CurrencyMode.BASE_ONLY).startswith("$3.4")
        assert format_price(1.999, CurrencyMode.BASE_ONLY) == "$2.00"


class TestFormatWeight:
    def test_value(self):
        assert format_weight(0.25) == "0.25 kg"

    def test_missing(self):
        assert format_weight(None) == "N/A"


class TestBuildRows:
    def test_length_and_order_preserved(self, make_products):
        products = make_products(7)
        rows = RowBuilder(StaticFetcher(), max_workers=3).build_rows(products, "usd")
        assert [r.name for r in rows] == [p.name for p in products]

    def test_empty_input(self):
        assert RowBuilder(StaticFetcher()).build_rows([], CurrencyMode.BOTH) == []

    def test_text_fields(self, full_product, png_payload):
        fetcher = StaticFetcher({"https://cdn.example.com/soap-front.jpg": png_payload})
        [row] = RowBuilder(fetcher).build_rows([full_product], CurrencyMode.BOTH)

        assert row.name == full_product.name
        assert row.barcode == "8680000000017"
        assert row.units_per_case == "12"
        assert row.weight == "0.25 kg"
        assert row.price == "$10.00 / €8.50"
        assert row.image == png_payload

    def test_placeholders(self, minimal_product):
        [row] = RowBuilder(StaticFetcher()).build_rows([minimal_product], CurrencyMode.BASE_ONLY)
        assert row.barcode == "N/A"
        assert row.weight == "N/A"
        assert row.units_per_case == "1"
        assert row.price == "$0.00"
        assert row.image.is_absent

    def test_only_primary_image_fetched(self, full_product):
        fetcher = StaticFetcher()
        RowBuilder(fetcher).build_rows([full_product], "usd")
        assert fetcher.requested == ["https://cdn.example.com/soap-front.jpg"]

    def test_products_without_images_not_fetched(self, make_products):
        fetcher = StaticFetcher()
        RowBuilder(fetcher).build_rows(make_products(3, with_images=False), "usd")
        assert fetcher.requested == []

    def test_fetch_exception_degrades_to_absent(self, make_products, png_payload):
        products = make_products(3)

        class FlakyFetcher:
            def fetch(self, url):
                if url.endswith("/2.png"):
                    raise RuntimeError("socket exploded")
                return png_payload

        rows = RowBuilder(FlakyFetcher(), max_workers=2).build_rows(products, "usd")

        assert len(rows) == 3
        assert not rows[0].image.is_absent
        assert rows[1].image.is_absent
        assert rows[1].name == "Product 2"
        assert not rows[2].image.is_absent

    def test_order_kept_when_fetches_finish_out_of_order(self, make_products):
        products = make_products(6)

        class SlowFirstFetcher:
            def fetch(self, url):
                index = int(url.rsplit("/", 1)[1].split(".")[0])
                time.sleep(0.01 * (7 - index))
                return ImagePayload(data_uri=f"data:image/png;base64,{index}", format_tag="PNG")

        rows = RowBuilder(SlowFirstFetcher(), max_workers=4).build_rows(products, "usd")

        assert [r.image.data_uri for r in rows] == [
            f"data:image/png;base64,{i}" for i in range(1, 7)
        ]

    def test_concurrency_is_bounded(self, make_products):
        lock = threading.Lock()
        state = {"active": 0, "peak": 0}

        class CountingFetcher:
            def fetch(self, url):
                with lock:
                    state["active"] += 1
                    state["peak"] = max(state["peak"], state["active"])
                time.sleep(0.01)
                with lock:
                    state["active"] -= 1
                return ImagePayload.absent()

        RowBuilder(CountingFetcher(), max_workers=2).build_rows(make_products(8), "usd")
        assert state["peak"] <= 2

    def test_sequential_mode(self, make_products):
        fetcher = StaticFetcher()
        RowBuilder(fetcher, max_workers=1).build_rows(make_products(4), "usd")
        assert fetcher.requested == [f"https://cdn.example.com/{i}.png" for i in range(1, 5)]

    def test_idempotent(self, make_products, png_payload):
        products = make_products(5)
        builder = RowBuilder(StaticFetcher(default=png_payload))
        assert builder.build_rows(products, "both") == builder.build_rows(products, "both")

    def test_invalid_mode_raises(self, make_products):
        with pytest.raises(ValueError):
            RowBuilder(StaticFetcher()).build_rows(make_products(1), "gbp")

    def test_mode_literal_accepted(self):
        product = CatalogProduct(id="1", name="Soap", unit_price=10.0,
                                 images=(CatalogImage(url="https://cdn.example.com/x.png"),))
        [row] = RowBuilder(StaticFetcher()).build_rows([product], "eur")
        assert row.price == "€8.50"
