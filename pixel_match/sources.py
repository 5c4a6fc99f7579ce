"""
Image source resolution.

Turns whatever the caller hands to a search (raw bytes, an open binary
file, a filesystem path, a ``data:`` URL or a remote URL) into the raw
encoded image bytes. Remote URLs are never fetched here: the caller
supplies an async ``fetcher`` that owns network and cross-origin policy.

Resolution is the only awaitable step of a search.
"""

import asyncio
import base64
import binascii
import logging
import os
from typing import Any, Awaitable, Callable, Optional, Union
from urllib.parse import unquote_to_bytes

from .errors import ImageDecodeError

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[bytes]]
ImageSource = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]", Any]

REMOTE_SCHEMES = ("http://", "https://")


def is_empty_source(source: ImageSource) -> bool:
    """True for ``None``, empty byte strings and blank paths/URLs."""
    if source is None:
        return True
    if isinstance(source, (bytes, bytearray, memoryview)):
        return len(source) == 0
    if isinstance(source, str):
        return not source.strip()
    return False


def _decode_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(",")
    if not sep:
        raise ImageDecodeError("Malformed data URL: missing ',' separator")
    try:
        if header.lower().endswith(";base64"):
            return base64.b64decode(payload, validate=True)
        return unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Malformed data URL payload: {e}") from e


def _as_bytes(data: Any, origin: str) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise ImageDecodeError(
        f"{origin} returned {type(data).__name__}, expected bytes"
    )


def _read_path(path: Union[str, "os.PathLike[str]"]) -> bytes:
    with open(path, "rb") as f:
        return f.read()


async def resolve_image_source(source: ImageSource,
                               fetcher: Optional[Fetcher] = None) -> bytes:
    """
    Resolve an image source to encoded image bytes.

    Args:
        source: Bytes-like object, binary file object (anything with
            ``read()``), path, ``data:`` URL or ``http(s)://`` URL.
        fetcher: Async callable used for remote URLs.

    Returns:
        The encoded image bytes.

    Raises:
        ImageDecodeError: If the source is unsupported, unreadable or
            unreachable.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)

    if hasattr(source, "read"):
        try:
            data = await asyncio.to_thread(source.read)
        except (OSError, ValueError) as e:
            raise ImageDecodeError(f"Failed to read image file: {e}") from e
        if isinstance(data, str):
            raise ImageDecodeError("Image file must be opened in binary mode")
        return _as_bytes(data, "Image file read()")

    if isinstance(source, str):
        location = source.strip()
        if location.startswith("data:"):
            return _decode_data_url(location)
        if location.lower().startswith(REMOTE_SCHEMES):
            if fetcher is None:
                raise ImageDecodeError(
                    f"No fetcher configured for remote image: {location}"
                )
            try:
                data = await fetcher(location)
            except ImageDecodeError:
                raise
            except Exception as e:
                raise ImageDecodeError(f"Failed to fetch image {location}: {e}") from e
            return _as_bytes(data, f"Fetcher for {location}")
        source = location

    if isinstance(source, (str, os.PathLike)):
        try:
            return await asyncio.to_thread(_read_path, source)
        except OSError as e:
            raise ImageDecodeError(f"Failed to read image {source}: {e}") from e

    raise ImageDecodeError(f"Invalid image source: {type(source).__name__}")
