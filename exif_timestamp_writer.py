#!/usr/bin/env python3
"""
EXIF Timestamp Writer

Narrow adapter over piexif that stamps a single JPEG with a capture,
digitized and modification time. Every codec or I/O failure surfaces as
MutateError so callers only ever handle one exception type.

The new image is built in memory, checked, written to a temporary sibling
and moved over the original with os.replace, so a failed write leaves the
original untouched.
"""

import io
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

import piexif

# Field name -> (IFD name, tag id). Tag ids are fixed by the EXIF standard.
TIMESTAMP_FIELDS = {
    "DateTimeOriginal": ("Exif", piexif.ExifIFD.DateTimeOriginal),  # 0x9003
    "DateTimeDigitized": ("Exif", piexif.ExifIFD.DateTimeDigitized),  # 0x9004
    "DateTime": ("0th", piexif.ImageIFD.DateTime),  # 0x0132 (ModifyDate)
}


class MutateError(Exception):
    """Exception raised when a file's EXIF metadata cannot be read or written."""

    pass


def apply_timestamp(file_path: Path, timestamp: str) -> None:
    """
    Set the three EXIF timestamp fields of a file to the same value.

    The existing EXIF block is loaded, updated and re-encoded, so all other
    tags survive. The result is read back before it replaces the original.

    Args:
        file_path: JPEG file to modify
        timestamp: EXIF datetime string, 'YYYY:MM:DD HH:MM:SS'

    Raises:
        MutateError: If the container cannot be parsed, encoded or written
    """
    file_path = Path(file_path)

    try:
        exif_dict = piexif.load(str(file_path))

        for ifd_name, tag_id in TIMESTAMP_FIELDS.values():
            exif_dict.setdefault(ifd_name, {})[tag_id] = timestamp

        exif_bytes = piexif.dump(exif_dict)
        output_buffer = io.BytesIO()
        piexif.insert(exif_bytes, str(file_path), new_file=output_buffer)
        image_data = output_buffer.getvalue()
    except Exception as e:
        raise MutateError(str(e) or e.__class__.__name__) from e

    written_timestamps = read_timestamps(image_data)
    if any(value != timestamp for value in written_timestamps.values()):
        raise MutateError(
            f"timestamps did not read back as {timestamp!r}: {written_timestamps}"
        )

    _replace_file_contents(file_path, image_data)


def _replace_file_contents(file_path: Path, image_data: bytes):
    """Write image_data to a temporary sibling, then move it over file_path."""
    try:
        temp_handle = tempfile.NamedTemporaryFile(
            dir=file_path.parent,
            prefix=f".{file_path.name}.",
            suffix=".tmp",
            delete=False,
        )
    except OSError as e:
        raise MutateError(f"failed to create temporary file: {e}") from e

    temp_path = Path(temp_handle.name)
    try:
        with temp_handle:
            temp_handle.write(image_data)
            temp_handle.flush()
            os.fsync(temp_handle.fileno())
        shutil.copymode(file_path, temp_path)
        os.replace(temp_path, file_path)
    except OSError as e:
        if temp_path.exists():
            temp_path.unlink()
        raise MutateError(f"failed while writing image: {e}") from e


def read_timestamps(source: Union[Path, bytes]) -> Dict[str, Optional[str]]:
    """
    Read the three EXIF timestamp fields from a file or in-memory JPEG.

    Args:
        source: JPEG file path, or the raw bytes of a JPEG

    Returns:
        Dictionary keyed by field name; missing fields map to None

    Raises:
        MutateError: If the container cannot be parsed
    """
    try:
        if isinstance(source, bytes):
            exif_dict = piexif.load(source)
        else:
            exif_dict = piexif.load(str(source))
    except Exception as e:
        raise MutateError(str(e) or e.__class__.__name__) from e

    timestamps = {}
    for field_name, (ifd_name, tag_id) in TIMESTAMP_FIELDS.items():
        raw_value = (exif_dict.get(ifd_name) or {}).get(tag_id)
        if raw_value is None:
            timestamps[field_name] = None
        else:
            timestamps[field_name] = raw_value.rstrip(b"\x00").decode(
                "ascii", errors="replace"
            )

    return timestamps
