"""Media store: persists uploaded images and serves their size variants.

Originals are written to ``<uploads_base_path>/<subdir>/<YYYY>/<MM>/`` under a
UUID-based file name. Smaller renditions are generated with Pillow at ingest
time; a variant that was not generated (the original is already smaller)
resolves to the original file.
"""

import logging
import shutil
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID, uuid4

from PIL import Image
from sqlalchemy.orm import Session

from reviews_design.config import settings
from reviews_design.models.media_attachment import MediaAttachment
from reviews_design.services.uploads import (
    FileDescriptor,
    mime_type_for_extension,
    sanitize_file_name,
    sanitize_subdir,
)

logger = logging.getLogger(__name__)

FULL = "full"
SIZE_VARIANTS = ("thumbnail", "medium", FULL)


class MediaError(Exception):
    """Raised when the media store cannot ingest a file."""


def _coerce_id(attachment_id: UUID | str) -> UUID | None:
    if isinstance(attachment_id, UUID):
        return attachment_id
    try:
        return UUID(str(attachment_id))
    except ValueError:
        return None


class MediaStore:
    def __init__(
        self,
        db: Session,
        base_path: Path | None = None,
        url_prefix: str | None = None,
    ):
        self.db = db
        self.base_path = Path(base_path or settings.uploads_base_path)
        self.url_prefix = (url_prefix or settings.media_url_prefix).rstrip("/")
        self.rendition_sizes = {
            "thumbnail": settings.thumbnail_size,
            "medium": settings.medium_size,
        }

    def get(self, attachment_id: UUID | str) -> MediaAttachment | None:
        key = _coerce_id(attachment_id)
        if key is None:
            return None
        return self.db.get(MediaAttachment, key)

    def ingest(
        self,
        descriptor: FileDescriptor,
        owner_subject_id: UUID | None,
        allowed_types: Iterable[str],
        subdir: str | None = None,
    ) -> UUID:
        """Store one uploaded file and return its attachment id.

        Args:
            descriptor: The uploaded file
            owner_subject_id: Content item the media belongs to
            allowed_types: MIME types this upload may have
            subdir: Uploads subdirectory, sanitized before use

        Raises:
            MediaError: If the type is not allowed or the file cannot be written
        """
        content_type = mime_type_for_extension(descriptor.name)
        if content_type is None or content_type not in set(allowed_types):
            raise MediaError(f"File type not allowed: {descriptor.name}")

        safe_subdir = sanitize_subdir(subdir)
        now = datetime.now(timezone.utc)
        relative_dir = Path(safe_subdir) / f"{now:%Y}" / f"{now:%m}"
        target_dir = self.base_path / relative_dir

        original_filename = sanitize_file_name(descriptor.name)
        suffix = Path(original_filename).suffix.lower()
        stem = uuid4().hex
        filename = f"{stem}{suffix}"
        storage_path = relative_dir / filename

        written = [storage_path]
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            descriptor.temp_file.seek(0)
            with open(self.base_path / storage_path, "wb") as out:
                shutil.copyfileobj(descriptor.temp_file, out)
            renditions = self._make_renditions(storage_path, stem, suffix, written)
        except OSError as e:
            for relative in written:
                (self.base_path / relative).unlink(missing_ok=True)
            raise MediaError(f"Could not store {descriptor.name}: {e}") from e

        attachment = MediaAttachment(
            owner_subject_id=owner_subject_id,
            filename=filename,
            original_filename=original_filename,
            content_type=content_type,
            size_bytes=descriptor.size,
            subdir=safe_subdir,
            storage_path=storage_path.as_posix(),
            renditions=renditions,
        )
        self.db.add(attachment)
        self.db.flush()

        logger.debug(f"Stored media {attachment.id} at {storage_path}")
        return attachment.id

    def _make_renditions(
        self, storage_path: Path, stem: str, suffix: str, written: list[Path]
    ) -> dict[str, str]:
        """Generate smaller variants. Each path is appended to ``written`` before its file is created."""
        renditions = {}
        source = self.base_path / storage_path
        for variant, size in self.rendition_sizes.items():
            with Image.open(source) as image:
                if image.width <= size and image.height <= size:
                    continue
                image_format = image.format
                image.thumbnail((size, size))
                rendition_path = storage_path.with_name(f"{stem}-{size}x{size}{suffix}")
                written.append(rendition_path)
                image.save(self.base_path / rendition_path, format=image_format)
            renditions[variant] = rendition_path.as_posix()
        return renditions

    def file_path(self, attachment_id: UUID | str, variant: str = FULL) -> Path | None:
        """Path of a stored variant on disk, or None if it does not exist."""
        if variant not in SIZE_VARIANTS:
            return None
        attachment = self.get(attachment_id)
        if attachment is None:
            return None
        relative = (attachment.renditions or {}).get(variant) or attachment.storage_path
        path = self.base_path / relative
        return path if path.is_file() else None

    def resolve(self, attachment_id: UUID | str, variant: str = FULL) -> str | None:
        """URL of a size variant, or None when the attachment or its file is gone."""
        if self.file_path(attachment_id, variant) is None:
            return None
        return f"{self.url_prefix}/{_coerce_id(attachment_id)}/{variant}"

    def delete(self, attachment_id: UUID | str, cascade: bool = True) -> bool:
        """Delete an attachment record and its original file; ``cascade`` also removes renditions."""
        attachment = self.get(attachment_id)
        if attachment is None:
            return False

        paths = [attachment.storage_path]
        if cascade:
            paths.extend((attachment.renditions or {}).values())
        for relative in paths:
            try:
                (self.base_path / relative).unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove media file {relative}: {e!r}")

        self.db.delete(attachment)
        self.db.flush()
        logger.info(f"Deleted media {attachment_id}")
        return True
