from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reviews_design.models.base import Base, TimestampMixin, UUIDMixin
from reviews_design.models.enums import ContentItemType


class ContentItem(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "content_items"

    item_type: Mapped[ContentItemType] = mapped_column(
        Enum(ContentItemType, name="content_item_type", native_enum=True),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    reviews: Mapped[list["Review"]] = relationship(
        "Review", back_populates="subject", cascade="all, delete-orphan"
    )

    @property
    def is_reviewable(self) -> bool:
        return self.item_type == ContentItemType.PRODUCT
