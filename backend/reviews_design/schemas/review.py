from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from reviews_design.schemas.review_image import ReviewImage


class Review(BaseModel):
    """Review as shown in product review listings."""

    id: UUID = Field(description="Review unique identifier")
    subject_id: UUID = Field(description="Reviewed product ID")
    author_name: str = Field(description="Display name of the reviewer")
    author_url: str | None = Field(default=None, description="Reviewer website")
    author_is_guest: bool = Field(description="Whether the review was submitted without an account")
    rating: int = Field(description="Rating from 1 to 5")
    content: str = Field(description="Review text")
    created_at: datetime = Field(description="Submission timestamp")
    images: list[ReviewImage] = Field(default_factory=list, description="Approved images in display order")

    model_config = {"from_attributes": True}


class ReviewPage(BaseModel):
    items: list[Review] = Field(description="Reviews on this page")
    total: int = Field(description="Total number of reviews")
    page: int = Field(description="Current page number")
    pages: int = Field(description="Total number of pages")
    per_page: int = Field(description="Reviews per page")


class FormField(BaseModel):
    name: str
    label: str
    type: str
    required: bool = False


class ImageUploadField(BaseModel):
    """File input accepting review images."""

    name: str = "review_images"
    label: str
    max_files: int
    max_file_size_bytes: int
    max_total_size_bytes: int
    accept: list[str]


class ReviewForm(BaseModel):
    fields: list[FormField] = Field(description="Form fields in display order")
    image_upload: ImageUploadField | None = Field(
        default=None, description="Image upload field, present when this visitor may attach images"
    )
