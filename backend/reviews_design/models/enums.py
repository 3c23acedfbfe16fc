from enum import Enum


class ContentItemType(str, Enum):
    PRODUCT = "product"
    PAGE = "page"
    POST = "post"


class ImageApprovalStatus(str, Enum):
    """Approval flag shared by every image attached to one review."""

    PENDING = "pending"
    APPROVED = "approved"
