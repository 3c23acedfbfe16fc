from reviews_design.models.base import Base
from reviews_design.models.content_item import ContentItem
from reviews_design.models.enums import ContentItemType, ImageApprovalStatus
from reviews_design.models.media_attachment import MediaAttachment
from reviews_design.models.option import Option
from reviews_design.models.review import Review
from reviews_design.models.review_image import MAX_IMAGES_PER_REVIEW, ReviewImageAttachment

__all__ = [
    # Base
    "Base",
    # Enums
    "ContentItemType",
    "ImageApprovalStatus",
    # Models
    "ContentItem",
    "MediaAttachment",
    "Option",
    "Review",
    "ReviewImageAttachment",
    # Limits
    "MAX_IMAGES_PER_REVIEW",
]
