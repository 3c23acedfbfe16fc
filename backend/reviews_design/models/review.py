from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviews_design.models.base import Base, CreatedAtMixin, UUIDMixin


class Review(Base, UUIDMixin, CreatedAtMixin):
    """A customer review of a product. ``author_id`` is empty for guest reviews."""

    __tablename__ = "reviews"

    subject_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    author_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    author_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    subject: Mapped["ContentItem"] = relationship("ContentItem", back_populates="reviews")
    image_attachment: Mapped["ReviewImageAttachment | None"] = relationship(
        "ReviewImageAttachment", back_populates="review", uselist=False, cascade="all, delete-orphan"
    )

    @property
    def author_is_guest(self) -> bool:
        return self.author_id is None
