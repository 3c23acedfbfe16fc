from reviews_design.schemas.base import PaginatedResponse, StandardError
from reviews_design.schemas.review import (
    FormField,
    ImageUploadField,
    Review,
    ReviewForm,
    ReviewPage,
)
from reviews_design.schemas.review_image import (
    ModerationForm,
    ModerationImage,
    ModerationPanel,
    ModerationSummary,
    ReviewImage,
)
from reviews_design.schemas.settings import (
    CommentOrder,
    DefaultCommentsPage,
    DiscussionSettings,
    ReviewSettings,
    SettingsResponse,
    SettingsUpdate,
)

__all__ = [
    # Base
    "PaginatedResponse",
    "StandardError",
    # Review
    "Review",
    "ReviewPage",
    "ReviewForm",
    "FormField",
    "ImageUploadField",
    # Review images
    "ReviewImage",
    "ModerationImage",
    "ModerationSummary",
    "ModerationPanel",
    "ModerationForm",
    # Settings
    "ReviewSettings",
    "DiscussionSettings",
    "SettingsResponse",
    "SettingsUpdate",
    "CommentOrder",
    "DefaultCommentsPage",
]
