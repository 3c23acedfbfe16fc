from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from reviews_design.auth import OptionalUser
from reviews_design.database import get_db, get_or_404
from reviews_design.dependencies import CurrentDiscussionSettings, CurrentReviewSettings, Media
from reviews_design.models.content_item import ContentItem as ContentItemModel
from reviews_design.models.review import Review as ReviewModel
from reviews_design.models.review_image import MAX_IMAGES_PER_REVIEW
from reviews_design.schemas import (
    CommentOrder,
    DefaultCommentsPage,
    FormField,
    ImageUploadField,
    Review,
    ReviewForm,
    ReviewPage,
    ReviewSettings,
    StandardError,
)
from reviews_design.services.events import EventContext, ReviewCreated, event_bus
from reviews_design.services.media import MediaStore
from reviews_design.services.options import load_theme_palette
from reviews_design.services.palette import css_variables, resolve_colors
from reviews_design.services.review_images import (
    MAX_FILE_SIZE_BYTES,
    MAX_TOTAL_SIZE_BYTES,
    images_allowed,
    visible_images,
)
from reviews_design.services.uploads import ALLOWED_IMAGE_TYPES, normalize_uploads

router = APIRouter()

IMAGE_UPLOAD_LABEL = "Review images (up to 3 files, JPG/PNG/WebP, max 1.2MB each)"
ACCOUNT_AUTHOR_NAME = "Customer"


# =============================================================================
# Private Helper Functions
# =============================================================================


def _get_product_or_404(db: Session, product_id: UUID) -> ContentItemModel:
    item = get_or_404(db, ContentItemModel, product_id, detail="Product not found")
    if not item.is_reviewable:
        raise HTTPException(status_code=404, detail="Product not found")
    return item


def _build_review_response(
    review: ReviewModel, db: Session, media: MediaStore, config: ReviewSettings
) -> Review:
    return Review(
        id=review.id,
        subject_id=review.subject_id,
        author_name=review.author_name,
        author_url=review.author_url,
        author_is_guest=review.author_is_guest,
        rating=review.rating,
        content=review.content,
        created_at=review.created_at,
        images=visible_images(db, media, review.id, config),
    )


def _build_review_form(config: ReviewSettings, is_logged_in: bool) -> ReviewForm:
    fields = []
    if not is_logged_in:
        fields.append(FormField(name="author_name", label="Name", type="text", required=True))
        fields.append(FormField(name="author_email", label="Email", type="email"))
        if config.show_website_field:
            fields.append(FormField(name="author_url", label="Website", type="url"))
    fields.append(FormField(name="rating", label="Your rating", type="rating", required=True))
    fields.append(FormField(name="content", label="Your review", type="textarea", required=True))

    image_upload = None
    if images_allowed(config, is_logged_in):
        image_upload = ImageUploadField(
            label=IMAGE_UPLOAD_LABEL,
            max_files=MAX_IMAGES_PER_REVIEW,
            max_file_size_bytes=MAX_FILE_SIZE_BYTES,
            max_total_size_bytes=MAX_TOTAL_SIZE_BYTES,
            accept=list(ALLOWED_IMAGE_TYPES),
        )
    return ReviewForm(fields=fields, image_upload=image_upload)


# =============================================================================
# Review Form & Submission
# =============================================================================


@router.get(
    "/products/{product_id}/review-form",
    response_model=ReviewForm,
    summary="Describe the review form",
    description="Fields of the product review form for the current visitor, including the image upload field when enabled.",
    responses={404: {"model": StandardError, "description": "Product not found"}},
)
async def get_review_form(
    product_id: UUID,
    user: OptionalUser,
    config: CurrentReviewSettings,
    db: Session = Depends(get_db),
):
    _get_product_or_404(db, product_id)
    return _build_review_form(config, is_logged_in=user is not None)


@router.post(
    "/products/{product_id}/reviews",
    response_model=Review,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a product review",
    description="""
Submit a review, optionally with up to three images (JPEG, PNG or WebP).

Images that fail validation are dropped without an error. Depending on the
settings, accepted images may stay hidden until a moderator approves them.
    """,
    responses={
        400: {"model": StandardError, "description": "Validation error"},
        403: {"model": StandardError, "description": "Reviews are disabled"},
        404: {"model": StandardError, "description": "Product not found"},
    },
)
async def create_review(
    product_id: UUID,
    user: OptionalUser,
    config: CurrentReviewSettings,
    discussion: CurrentDiscussionSettings,
    media: Media,
    rating: int = Form(ge=1, le=5),
    content: str = Form(min_length=1),
    author_name: str | None = Form(default=None),
    author_email: str | None = Form(default=None),
    author_url: str | None = Form(default=None),
    review_images: list[UploadFile] | None = File(default=None),
    db: Session = Depends(get_db),
):
    product = _get_product_or_404(db, product_id)

    if not discussion.enable_reviews:
        raise HTTPException(status_code=403, detail="Reviews are disabled")

    author_name = (author_name or "").strip()
    if not author_name:
        if user is None:
            raise HTTPException(status_code=400, detail="author_name is required for guest reviews")
        author_name = ACCOUNT_AUTHOR_NAME

    review = ReviewModel(
        subject_id=product.id,
        author_id=user.id if user else None,
        author_name=author_name,
        author_email=author_email,
        author_url=author_url if config.show_website_field else None,
        rating=rating,
        content=content,
    )
    db.add(review)
    db.flush()

    event_bus.publish(
        ReviewCreated(
            review_id=review.id,
            subject_id=product.id,
            is_logged_in=user is not None,
            files=normalize_uploads(review_images),
        ),
        EventContext(db=db, media=media, config=config),
    )

    return _build_review_response(review, db, media, config)


# =============================================================================
# Review Listing
# =============================================================================


@router.get(
    "/products/{product_id}/reviews",
    response_model=ReviewPage,
    summary="List product reviews",
    description="""
List reviews of a product with their visible images.

Paging follows the discussion settings: when paging is off every review is on
one page. Without an explicit `page` the default page is the last one
(`newest`) or the first one (`oldest`).
    """,
    responses={404: {"model": StandardError, "description": "Product not found"}},
)
async def list_product_reviews(
    product_id: UUID,
    config: CurrentReviewSettings,
    discussion: CurrentDiscussionSettings,
    media: Media,
    page: int | None = Query(default=None, ge=1, description="Page number"),
    db: Session = Depends(get_db),
):
    _get_product_or_404(db, product_id)

    total = db.scalar(select(func.count(ReviewModel.id)).where(ReviewModel.subject_id == product_id))

    if discussion.page_comments:
        per_page = discussion.comments_per_page
    else:
        per_page = max(total, 1)
    pages = (total + per_page - 1) // per_page if total > 0 else 0

    if page is None:
        if discussion.default_comments_page == DefaultCommentsPage.NEWEST:
            page = max(pages, 1)
        else:
            page = 1

    # Pages are cut chronologically; comment_order only orders reviews within a page
    reviews = list(
        db.scalars(
            select(ReviewModel)
            .where(ReviewModel.subject_id == product_id)
            .order_by(ReviewModel.created_at.asc(), ReviewModel.id.asc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        ).all()
    )
    if discussion.comment_order == CommentOrder.DESC:
        reviews.reverse()

    return ReviewPage(
        items=[_build_review_response(r, db, media, config) for r in reviews],
        total=total,
        page=page,
        pages=pages,
        per_page=per_page,
    )


@router.get(
    "/reviews/theme.css",
    summary="Review UI colors",
    description="CSS custom properties for the review UI, from the configured palette.",
    response_class=Response,
    responses={200: {"content": {"text/css": {}}}},
)
async def get_theme_css(config: CurrentReviewSettings, db: Session = Depends(get_db)):
    colors = resolve_colors(config.colors, load_theme_palette(db))
    return Response(content=css_variables(colors), media_type="text/css")
