"""Tests for offline catalog fingerprint construction."""

import asyncio
import json
import os

from pixel_match.catalog import load_catalog
from pixel_match.index_builder import (
    build_catalog, fingerprint_records, resolve_image_location,
)
from helpers import FULL_HASH, ZERO_HASH, encode_png


class TestResolveImageLocation:
    """Tests for product image path resolution."""

    def test_site_root_path_joined(self, tmp_path):
        location = resolve_image_location("/images/a.png", str(tmp_path))
        assert location == os.path.join(str(tmp_path), "images/a.png")

    def test_relative_path_joined(self, tmp_path):
        assert resolve_image_location("a.png", str(tmp_path)) == \
            os.path.join(str(tmp_path), "a.png")

    def test_remote_url_untouched(self, tmp_path):
        url = "https://cdn.example.com/a.png"
        assert resolve_image_location(url, str(tmp_path)) == url

    def test_no_image_dir(self):
        assert resolve_image_location("a.png") == "a.png"


class TestFingerprintRecords:
    """Tests for batch hashing of product records."""

    def test_failure_keeps_previous_hash(self, tmp_path, falling_gradient_image):
        (tmp_path / "good.png").write_bytes(encode_png(falling_gradient_image))
        records = [
            {"id": 1, "imageUrl": "good.png", "hash": ZERO_HASH},
            {"id": 2, "imageUrl": "missing.png", "hash": "old"},
            {"id": 3, "name": "no image"},
        ]
        updated, errors = asyncio.run(
            fingerprint_records(records, image_dir=str(tmp_path))
        )
        assert errors == 2
        assert updated[0]["hash"] == FULL_HASH
        assert updated[1]["hash"] == "old"
        assert "hash" not in updated[2]
        assert records[0]["hash"] == ZERO_HASH

    def test_non_object_records_skipped(self, tmp_path, falling_gradient_image):
        (tmp_path / "good.png").write_bytes(encode_png(falling_gradient_image))
        records = [None, {"id": 1, "imageUrl": "good.png"}, "junk", 42]
        updated, errors = asyncio.run(
            fingerprint_records(records, image_dir=str(tmp_path))
        )
        assert errors == 3
        assert [r["id"] for r in updated] == [1]
        assert updated[0]["hash"] == FULL_HASH

    def test_remote_images_use_fetcher(self, rising_gradient_image):
        payload = encode_png(rising_gradient_image)

        async def fetcher(url):
            return payload

        records = [{"id": 1, "imageUrl": "https://cdn.example.com/1.png"}]
        updated, errors = asyncio.run(fingerprint_records(records, fetcher=fetcher))
        assert errors == 0
        assert updated[0]["hash"] == ZERO_HASH


class TestBuildCatalog:
    """Tests for writing the precomputed catalog."""

    def test_builds_loadable_catalog(self, tmp_path, falling_gradient_image,
                                     rising_gradient_image):
        images = tmp_path / "images"
        images.mkdir()
        (images / "falling.png").write_bytes(encode_png(falling_gradient_image))
        (images / "rising.png").write_bytes(encode_png(rising_gradient_image))

        products = tmp_path / "products.json"
        products.write_text(json.dumps([
            {"id": 1, "name": "Falling", "category": "Test",
             "imageUrl": "/images/falling.png"},
            {"id": 2, "name": "Rising", "category": "Test",
             "imageUrl": "/images/rising.png"},
        ]))
        output = tmp_path / "data" / "precomputed.json"

        summary = asyncio.run(build_catalog(str(products), str(output)))

        assert summary["success"]
        assert summary["processed"] == 2
        assert summary["hashed"] == 2
        assert summary["errors"] == 0

        catalog = load_catalog(str(output))
        assert [p.fingerprint for p in catalog] == [FULL_HASH, ZERO_HASH]

    def test_null_record_still_writes_output(self, tmp_path, rising_gradient_image):
        (tmp_path / "rising.png").write_bytes(encode_png(rising_gradient_image))
        products = tmp_path / "products.json"
        products.write_text(json.dumps([None, {"id": 2, "imageUrl": "rising.png"}]))
        output = tmp_path / "precomputed.json"

        summary = asyncio.run(build_catalog(str(products), str(output)))

        assert summary["success"]
        assert summary["processed"] == 2
        assert summary["hashed"] == 1
        assert summary["errors"] == 1
        assert [p.fingerprint for p in load_catalog(str(output))] == [ZERO_HASH]

    def test_empty_product_file(self, tmp_path):
        products = tmp_path / "products.json"
        products.write_text("[]")
        summary = asyncio.run(build_catalog(str(products), str(tmp_path / "out.json")))
        assert not summary["success"]
