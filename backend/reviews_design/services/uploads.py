"""Typed view of a multi-file upload, plus the checks applied to each file.

The raw multipart payload is converted into ``FileDescriptor`` values once, at
the request boundary. Everything downstream works with descriptors only.
"""

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import BinaryIO

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from reviews_design.schemas.settings import DEFAULT_IMAGES_SUBDIR

logger = logging.getLogger(__name__)

# MIME type -> (Pillow format, accepted extensions)
ALLOWED_IMAGE_TYPES: dict[str, tuple[str, tuple[str, ...]]] = {
    "image/jpeg": ("JPEG", (".jpg", ".jpeg", ".jpe")),
    "image/png": ("PNG", (".png",)),
    "image/webp": ("WEBP", (".webp",)),
}

_MIME_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg", "image/x-png": "image/png"}


class TransportError(str, Enum):
    """Outcome of receiving one file, before any content checks."""

    OK = "ok"
    NO_FILE = "no_file"
    PARTIAL = "partial"
    TOO_LARGE = "too_large"
    WRITE_FAILED = "write_failed"


@dataclass(frozen=True)
class FileDescriptor:
    name: str
    declared_mime_type: str
    temp_file: BinaryIO
    transport_error: TransportError
    size: int


def _measure(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def normalize_uploads(uploads: list[UploadFile] | None) -> list[FileDescriptor]:
    """Turn a multipart file list into descriptors, keeping upload order and dropping unnamed parts."""
    descriptors = []
    for upload in uploads or []:
        if not upload.filename:
            continue
        try:
            size = _measure(upload)
            error = TransportError.OK
        except OSError as e:
            logger.debug(f"Could not read uploaded file '{upload.filename}': {e!r}")
            size = 0
            error = TransportError.PARTIAL
        descriptors.append(
            FileDescriptor(
                name=upload.filename,
                declared_mime_type=upload.content_type or "",
                temp_file=upload.file,
                transport_error=error,
                size=size,
            )
        )
    return descriptors


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_file_name(name: str) -> str:
    """Reduce an uploaded file name to a safe basename."""
    base = PurePosixPath(name.replace("\\", "/")).name
    base = _UNSAFE_FILENAME_CHARS.sub("-", base).strip(".-")
    return base or "image"


_UNSAFE_SUBDIR_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def sanitize_subdir(subdir: str | None) -> str:
    """Make a configured uploads subdirectory safe to join under the uploads root.

    Every path segment is reduced to ``[A-Za-z0-9_-]``; empty, ``.`` and ``..``
    segments are dropped. An empty result falls back to the default subdirectory.
    """
    segments = []
    for segment in (subdir or "").replace("\\", "/").split("/"):
        segment = _UNSAFE_SUBDIR_CHARS.sub("-", segment.strip()).strip("-")
        if segment:
            segments.append(segment)
    return "/".join(segments) or DEFAULT_IMAGES_SUBDIR


def mime_type_for_extension(name: str) -> str | None:
    suffix = PurePosixPath(name).suffix.lower()
    for mime_type, (_, extensions) in ALLOWED_IMAGE_TYPES.items():
        if suffix in extensions:
            return mime_type
    return None


def sniff_image_type(descriptor: FileDescriptor) -> str | None:
    """Return the file's MIME type if extension, declared type and content all agree.

    The content check decodes the image header with Pillow, so a script renamed
    to ``.jpg`` is rejected even when the browser declared ``image/jpeg``.
    """
    expected = mime_type_for_extension(descriptor.name)
    if expected is None:
        return None

    declared = descriptor.declared_mime_type.strip().lower()
    declared = _MIME_ALIASES.get(declared, declared)
    if declared != expected:
        return None

    expected_format = ALLOWED_IMAGE_TYPES[expected][0]
    stream = descriptor.temp_file
    try:
        stream.seek(0)
        with Image.open(stream) as image:
            detected_format = image.format
            image.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        logger.debug(f"Content check failed for '{descriptor.name}': {e!r}")
        return None
    finally:
        stream.seek(0)

    if detected_format != expected_format:
        return None
    return expected
