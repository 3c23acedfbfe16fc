from enum import Enum

from pydantic import BaseModel, Field, field_validator

DEFAULT_IMAGES_SUBDIR = "review-images"


class CommentOrder(str, Enum):
    """Order of reviews on each listing page."""

    ASC = "asc"
    DESC = "desc"


class DefaultCommentsPage(str, Enum):
    """Page shown when a listing is requested without a page number."""

    NEWEST = "newest"
    OLDEST = "oldest"


class ReviewSettings(BaseModel):
    """Plugin configuration stored as a single option document."""

    colors: dict[str, str] = Field(
        default_factory=dict, description="Palette role (primary, background, ...) to #rrggbb color"
    )
    show_website_field: bool = Field(default=True, description="Show the website field on the review form")
    allow_images: bool = Field(default=False, description="Accept images attached to reviews")
    allow_images_guests: bool = Field(default=False, description="Accept images from guest reviewers")
    require_image_approval: bool = Field(
        default=True, description="Hide review images until a moderator approves them"
    )
    images_subdir: str = Field(
        default=DEFAULT_IMAGES_SUBDIR, description="Uploads subdirectory for review images"
    )


class DiscussionSettings(BaseModel):
    """Store-level discussion options mirrored on the settings page."""

    enable_reviews: bool = Field(default=True, description="Accept product reviews at all")
    page_comments: bool = Field(default=False, description="Split review listings into pages")
    comments_per_page: int = Field(default=50, ge=1, description="Reviews per listing page")
    default_comments_page: DefaultCommentsPage = Field(
        default=DefaultCommentsPage.NEWEST, description="Page displayed by default"
    )
    comment_order: CommentOrder = Field(default=CommentOrder.ASC, description="Order of reviews on a page")


class SettingsResponse(BaseModel):
    settings: ReviewSettings = Field(description="Plugin settings with effective colors")
    discussion: DiscussionSettings = Field(description="Discussion settings")
    base_palette: dict[str, str] = Field(description="Fallback palette from theme and defaults")


class SettingsUpdate(BaseModel):
    """Settings page submission. Missing checkboxes count as unchecked."""

    show_website_field: bool = False
    allow_images: bool = False
    allow_images_guests: bool = False
    require_image_approval: bool = False
    images_subdir: str = DEFAULT_IMAGES_SUBDIR
    colors: dict[str, str] = Field(default_factory=dict, description="Raw color inputs by role")

    enable_reviews: bool = False
    page_comments: bool = False
    comments_per_page: int = 50
    default_comments_page: DefaultCommentsPage = DefaultCommentsPage.NEWEST
    comment_order: CommentOrder = CommentOrder.ASC

    @field_validator("comments_per_page", mode="before")
    @classmethod
    def clamp_comments_per_page(cls, v):
        try:
            v = int(v)
        except (TypeError, ValueError):
            return 50
        return max(v, 1)

    @field_validator("default_comments_page", mode="before")
    @classmethod
    def fallback_default_page(cls, v):
        if not isinstance(v, str) or v not in {p.value for p in DefaultCommentsPage}:
            return DefaultCommentsPage.NEWEST
        return v

    @field_validator("comment_order", mode="before")
    @classmethod
    def fallback_comment_order(cls, v):
        if not isinstance(v, str) or v not in {o.value for o in CommentOrder}:
            return CommentOrder.ASC
        return v
