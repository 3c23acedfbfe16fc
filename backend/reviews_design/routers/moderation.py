import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from reviews_design.auth import CurrentUser, RequireModerator, create_nonce, verify_nonce
from reviews_design.database import get_db, get_or_404
from reviews_design.dependencies import Media
from reviews_design.models.review import Review as ReviewModel
from reviews_design.schemas import (
    ModerationForm,
    ModerationPanel,
    ModerationSummary,
    PaginatedResponse,
    StandardError,
)
from reviews_design.services.media import MediaStore
from reviews_design.services.review_images import (
    get_review_images,
    moderate,
    moderation_images,
    moderation_summary,
)

logger = logging.getLogger(__name__)

router = APIRouter()

MODERATION_NONCE_ACTION = "moderate_review_images"


class AdminReview(BaseModel):
    id: UUID = Field(description="Review unique identifier")
    subject_id: UUID = Field(description="Reviewed product ID")
    author_name: str = Field(description="Display name of the reviewer")
    author_email: str | None = Field(default=None, description="Reviewer email")
    author_is_guest: bool = Field(description="Whether the review was submitted without an account")
    rating: int = Field(description="Rating from 1 to 5")
    content: str = Field(description="Review text")
    images: ModerationSummary = Field(description="Image status column")


def _build_panel(
    db: Session, media: MediaStore, user: CurrentUser, review_id: UUID
) -> ModerationPanel:
    record = get_review_images(db, review_id)
    return ModerationPanel(
        review_id=review_id,
        approved=bool(record and record.is_approved),
        images=moderation_images(db, media, review_id),
        nonce=create_nonce(MODERATION_NONCE_ACTION, user.id, review_id),
    )


@router.get(
    "/admin/reviews",
    response_model=PaginatedResponse[AdminReview],
    summary="List reviews for moderation",
    description="Newest reviews first, each with the status and thumbnails of its images.",
    responses={
        401: {"model": StandardError, "description": "Unauthorized"},
        403: {"model": StandardError, "description": "Missing moderation capability"},
    },
)
async def list_reviews_for_moderation(
    user: RequireModerator,
    media: Media,
    page: int = Query(default=1, ge=1, description="Page number"),
    limit: int = Query(default=20, ge=1, le=100, description="Items per page"),
    db: Session = Depends(get_db),
):
    total = db.scalar(select(func.count(ReviewModel.id)))

    offset = (page - 1) * limit
    reviews = db.scalars(
        select(ReviewModel)
        .order_by(ReviewModel.created_at.desc(), ReviewModel.id.desc())
        .offset(offset)
        .limit(limit)
    ).all()

    pages = (total + limit - 1) // limit if total > 0 else 0

    return PaginatedResponse[AdminReview](
        items=[
            AdminReview(
                id=r.id,
                subject_id=r.subject_id,
                author_name=r.author_name,
                author_email=r.author_email,
                author_is_guest=r.author_is_guest,
                rating=r.rating,
                content=r.content,
                images=moderation_summary(db, media, r.id),
            )
            for r in reviews
        ],
        total=total,
        page=page,
        limit=limit,
        pages=pages,
    )


@router.get(
    "/admin/reviews/{review_id}/images",
    response_model=ModerationPanel,
    summary="Get review image panel",
    description="All images of a review with their approval flag and a nonce for the moderation form.",
    responses={
        401: {"model": StandardError, "description": "Unauthorized"},
        403: {"model": StandardError, "description": "Missing moderation capability"},
        404: {"model": StandardError, "description": "Review not found"},
    },
)
async def get_review_image_panel(
    review_id: UUID,
    user: RequireModerator,
    media: Media,
    db: Session = Depends(get_db),
):
    get_or_404(db, ReviewModel, review_id)
    return _build_panel(db, media, user, review_id)


@router.post(
    "/admin/reviews/{review_id}/images",
    response_model=ModerationPanel,
    summary="Moderate review images",
    description="""
Delete selected images permanently and set the approval flag of the rest.

Deleting every image removes the review's image record, after which the
approval flag has nothing to apply to.
    """,
    responses={
        401: {"model": StandardError, "description": "Unauthorized"},
        403: {"model": StandardError, "description": "Invalid nonce or missing moderation capability"},
        404: {"model": StandardError, "description": "Review not found"},
    },
)
async def moderate_review_images(
    review_id: UUID,
    form: ModerationForm,
    user: RequireModerator,
    media: Media,
    db: Session = Depends(get_db),
):
    get_or_404(db, ReviewModel, review_id)

    if not verify_nonce(form.nonce, MODERATION_NONCE_ACTION, user.id, review_id):
        logger.warning(f"Rejected moderation of review {review_id} by {user.id}: invalid nonce")
        raise HTTPException(status_code=403, detail="Invalid or expired nonce")

    moderate(db, media, user, review_id, approved=form.approved, delete_ids=form.delete_ids)
    return _build_panel(db, media, user, review_id)
