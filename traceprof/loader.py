"""
Capture Loading

Reads capture JSON from disk (plain or gzip-compressed) and decodes it.
"""

import gzip
import json
import zlib
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger

from .errors import CaptureFormatError
from .location import LocationCache
from .profile import File


def load_json(path: Union[str, Path]) -> Any:
    """
    Read a JSON document; `.gz` files are decompressed first.

    Raises:
        OSError: If the file cannot be read
        CaptureFormatError: If the content is not gzip / UTF-8 JSON
    """
    path = Path(path)
    data = path.read_bytes()
    if path.suffix == '.gz':
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise CaptureFormatError(f"{path}: not a valid gzip file ({e})") from e
    try:
        return json.loads(data)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise CaptureFormatError(f"{path}: not valid JSON ({e})") from e


def decode_capture(data: Dict[str, Any], location_cache: Optional[LocationCache] = None) -> File:
    """
    Decode an already-parsed capture document.

    Args:
        data: Capture JSON object (columnar or legacy thread shape)
        location_cache: Share parsed locations with other captures (optional)

    Returns:
        Decoded File

    Raises:
        ProfileError: The capture is rejected
    """
    if not isinstance(data, dict):
        raise CaptureFormatError(f"Capture must be a JSON object, got {type(data).__name__}")
    return File(data, location_cache)


def load_capture(path: Union[str, Path], location_cache: Optional[LocationCache] = None) -> File:
    """Load and decode a capture file."""
    logger.info(f"Loading capture: {path}")
    file = decode_capture(load_json(path), location_cache)
    logger.info(f"Loaded {len(file.threads)} thread(s) from {path}")
    return file
