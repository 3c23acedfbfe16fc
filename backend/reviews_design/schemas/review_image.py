from uuid import UUID

from pydantic import BaseModel, Field

from reviews_design.models.enums import ImageApprovalStatus


class ReviewImage(BaseModel):
    """One image in a review's grid, with lightbox navigation positions."""

    id: UUID = Field(description="Media attachment ID")
    thumbnail_url: str = Field(description="Grid image URL")
    full_url: str = Field(description="Full-size image URL")
    position: int = Field(description="Zero-based position in the grid")
    previous_position: int = Field(description="Position shown by 'previous', wrapping to the last image")
    next_position: int = Field(description="Position shown by 'next', wrapping to the first image")


class ModerationImage(BaseModel):
    id: UUID
    thumbnail_url: str


class ModerationSummary(BaseModel):
    """Image status column of the admin review list."""

    review_id: UUID
    status: ImageApprovalStatus | None = Field(
        default=None, description="Stored approval status, empty when the review has no images"
    )
    status_label: str
    thumbnails: list[str] = Field(default_factory=list, description="Up to three thumbnail URLs")


class ModerationPanel(BaseModel):
    """Per-review image panel rendered on the review edit screen."""

    review_id: UUID
    approved: bool = Field(description="Whether the images are approved and visible")
    images: list[ModerationImage] = Field(default_factory=list)
    nonce: str = Field(description="Token to send back with the moderation form")


class ModerationForm(BaseModel):
    approved: bool = Field(default=False, description="Images approved checkbox")
    delete_ids: list[UUID] = Field(default_factory=list, description="Images to delete permanently")
    nonce: str = Field(description="Token issued with the moderation panel")
