"""Tests for image source resolution."""

import asyncio
import base64
import io
import pathlib

import pytest

from pixel_match.errors import ImageDecodeError
from pixel_match.sources import is_empty_source, resolve_image_source


class TestResolveImageSource:
    """Tests for turning sources into encoded bytes."""

    def test_bytes_passthrough(self):
        assert asyncio.run(resolve_image_source(bytearray(b"abc"))) == b"abc"

    def test_binary_file_object(self):
        assert asyncio.run(resolve_image_source(io.BytesIO(b"xyz"))) == b"xyz"

    def test_text_file_object_rejected(self):
        with pytest.raises(ImageDecodeError, match="binary"):
            asyncio.run(resolve_image_source(io.StringIO("text")))

    def test_file_object_returning_none(self):
        class NoneReader:
            def read(self):
                return None

        with pytest.raises(ImageDecodeError, match="expected bytes"):
            asyncio.run(resolve_image_source(NoneReader()))

    def test_path_and_pathlike(self, tmp_path):
        path = tmp_path / "img.bin"
        path.write_bytes(b"\x01\x02")
        assert asyncio.run(resolve_image_source(str(path))) == b"\x01\x02"
        assert asyncio.run(resolve_image_source(pathlib.Path(path))) == b"\x01\x02"

    def test_base64_data_url(self):
        url = "data:image/png;base64," + base64.b64encode(b"payload").decode()
        assert asyncio.run(resolve_image_source(url)) == b"payload"

    def test_uppercase_base64_marker(self):
        url = "data:image/png;BASE64," + base64.b64encode(b"payload").decode()
        assert asyncio.run(resolve_image_source(url)) == b"payload"

    def test_percent_encoded_data_url(self):
        url = "data:image/svg+xml,%3Csvg%3E%FF%00"
        assert asyncio.run(resolve_image_source(url)) == b"<svg>\xff\x00"

    def test_malformed_data_url(self):
        with pytest.raises(ImageDecodeError):
            asyncio.run(resolve_image_source("data:image/png;base64"))
        with pytest.raises(ImageDecodeError):
            asyncio.run(resolve_image_source("data:image/png;base64,@@@"))

    def test_unsupported_type(self):
        with pytest.raises(ImageDecodeError, match="Invalid image source"):
            asyncio.run(resolve_image_source(12345))


class TestIsEmptySource:
    """Tests for empty source detection."""

    @pytest.mark.parametrize("source", [None, b"", bytearray(), "", "  "])
    def test_empty(self, source):
        assert is_empty_source(source)

    @pytest.mark.parametrize("source", [b"x", "a.png", io.BytesIO()])
    def test_not_empty(self, source):
        assert not is_empty_source(source)
