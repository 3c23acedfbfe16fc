from uuid import UUID

from sqlalchemy import JSON, Integer, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from reviews_design.models.base import Base, CreatedAtMixin, UUIDMixin


class MediaAttachment(Base, UUIDMixin, CreatedAtMixin):
    """A stored image and its size variants."""

    __tablename__ = "media_attachments"

    owner_subject_id: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True), nullable=True, index=True)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    subdir: Mapped[str] = mapped_column(String(255), nullable=False)
    # Paths are relative to the uploads base path
    storage_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    renditions: Mapped[dict[str, str]] = mapped_column(JSON, default=dict, nullable=False)
