from uuid import UUID

from sqlalchemy import JSON, Enum, ForeignKey
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviews_design.models.base import Base, TimestampMixin, UUIDMixin
from reviews_design.models.enums import ImageApprovalStatus

MAX_IMAGES_PER_REVIEW = 3


class ReviewImageAttachment(Base, UUIDMixin, TimestampMixin):
    """Images uploaded with a review, in upload order, plus one approval flag for the batch."""

    __tablename__ = "review_image_attachments"

    review_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("reviews.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    # Media attachment ids as strings; reassign the list instead of mutating it
    attachment_ids: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    approval_status: Mapped[ImageApprovalStatus] = mapped_column(
        Enum(ImageApprovalStatus, name="image_approval_status", native_enum=True),
        default=ImageApprovalStatus.PENDING,
        nullable=False,
    )

    # Relationships
    review: Mapped["Review"] = relationship("Review", back_populates="image_attachment")

    @property
    def is_approved(self) -> bool:
        return self.approval_status == ImageApprovalStatus.APPROVED
