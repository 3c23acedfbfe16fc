"""Review images: upload workflow, moderation and rendering.

Upload is silent toward the reviewer. A file that fails a check is skipped,
a batch that exceeds the size budget is cut off, and a review may end up with
no images at all. Skips are logged for operators only.
"""

import logging
from collections.abc import Collection, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from reviews_design.auth import MODERATE_COMMENTS, CurrentUser
from reviews_design.models.content_item import ContentItem
from reviews_design.models.enums import ImageApprovalStatus
from reviews_design.models.review_image import MAX_IMAGES_PER_REVIEW, ReviewImageAttachment
from reviews_design.schemas.review_image import ModerationImage, ModerationSummary, ReviewImage
from reviews_design.schemas.settings import ReviewSettings
from reviews_design.services.events import EventBus, EventContext, ReviewCreated
from reviews_design.services.media import MediaError, MediaStore
from reviews_design.services.uploads import (
    ALLOWED_IMAGE_TYPES,
    FileDescriptor,
    TransportError,
    sniff_image_type,
)

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_BYTES = 1_258_291  # ~1.2 MB
MAX_TOTAL_SIZE_BYTES = 3_774_873  # ~3.6 MB
MAX_ADMIN_THUMBNAILS = 3

STATUS_LABELS = {
    ImageApprovalStatus.APPROVED: "Approved",
    ImageApprovalStatus.PENDING: "Pending images",
}


def get_review_images(db: Session, review_id: UUID) -> ReviewImageAttachment | None:
    return db.scalar(select(ReviewImageAttachment).where(ReviewImageAttachment.review_id == review_id))


def images_allowed(config: ReviewSettings, is_logged_in: bool) -> bool:
    """Whether this visitor may attach images to a review."""
    if not config.allow_images:
        return False
    return is_logged_in or config.allow_images_guests


# =============================================================================
# Upload
# =============================================================================


def submit_review_images(
    db: Session,
    media: MediaStore,
    review_id: UUID,
    subject_id: UUID,
    is_logged_in: bool,
    raw_files: Sequence[FileDescriptor],
    config: ReviewSettings,
) -> ReviewImageAttachment | None:
    """Validate, store and attach the images submitted with a new review.

    Files are taken in upload order. At most three are accepted, each no larger
    than MAX_FILE_SIZE_BYTES. Once the running size of the batch passes
    MAX_TOTAL_SIZE_BYTES no further files are looked at.

    Returns:
        The stored attachment record, or None when nothing was attached
    """
    files = [f for f in raw_files if f.name]
    if not files:
        return None

    subject = db.get(ContentItem, subject_id)
    if subject is None or not subject.is_reviewable:
        logger.debug(f"Review {review_id}: subject {subject_id} does not take review images")
        return None

    if not images_allowed(config, is_logged_in):
        logger.debug(f"Review {review_id}: images not allowed for this reviewer")
        return None

    if get_review_images(db, review_id) is not None:
        logger.warning(f"Review {review_id} already has images, ignoring second upload")
        return None

    allowed_types = list(ALLOWED_IMAGE_TYPES)
    total_size = 0
    attachment_ids: list[str] = []

    for descriptor in files:
        if len(attachment_ids) >= MAX_IMAGES_PER_REVIEW:
            break

        if descriptor.transport_error == TransportError.NO_FILE:
            continue
        if descriptor.transport_error != TransportError.OK or descriptor.size <= 0:
            logger.debug(f"Review {review_id}: skipping '{descriptor.name}' ({descriptor.transport_error.value})")
            continue
        if descriptor.size > MAX_FILE_SIZE_BYTES:
            logger.debug(f"Review {review_id}: skipping '{descriptor.name}', {descriptor.size} bytes is too large")
            continue

        total_size += descriptor.size
        if total_size > MAX_TOTAL_SIZE_BYTES:
            logger.debug(f"Review {review_id}: batch size limit reached at '{descriptor.name}'")
            break

        if sniff_image_type(descriptor) is None:
            logger.debug(f"Review {review_id}: skipping '{descriptor.name}', not a JPEG, PNG or WebP image")
            continue

        try:
            attachment_id = media.ingest(descriptor, subject_id, allowed_types, config.images_subdir)
        except MediaError as e:
            logger.warning(f"Review {review_id}: could not store '{descriptor.name}': {e}")
            continue

        attachment_ids.append(str(attachment_id))

    if not attachment_ids:
        return None

    record = ReviewImageAttachment(
        review_id=review_id,
        attachment_ids=attachment_ids,
        approval_status=(
            ImageApprovalStatus.PENDING if config.require_image_approval else ImageApprovalStatus.APPROVED
        ),
    )
    db.add(record)
    db.flush()

    logger.info(
        f"Review {review_id}: attached {len(attachment_ids)} of {len(files)} image(s), "
        f"status {record.approval_status.value}"
    )
    return record


def handle_review_created(event: ReviewCreated, context: EventContext) -> None:
    submit_review_images(
        context.db,
        context.media,
        review_id=event.review_id,
        subject_id=event.subject_id,
        is_logged_in=event.is_logged_in,
        raw_files=event.files,
        config=context.config,
    )


def register_handlers(bus: EventBus) -> None:
    bus.subscribe(ReviewCreated, handle_review_created)


# =============================================================================
# Moderation
# =============================================================================


def _can_moderate(user: CurrentUser | None) -> bool:
    return user is not None and user.can(MODERATE_COMMENTS)


def approve(
    db: Session, user: CurrentUser | None, review_id: UUID, approved: bool
) -> ReviewImageAttachment | None:
    """Set the approval flag of a review's images. Does nothing without moderation rights."""
    if not _can_moderate(user):
        logger.info(f"Review {review_id}: approval change denied")
        return None

    record = get_review_images(db, review_id)
    if record is None:
        return None

    status = ImageApprovalStatus.APPROVED if approved else ImageApprovalStatus.PENDING
    if record.approval_status != status:
        record.approval_status = status
        db.flush()
        logger.info(f"Review {review_id}: images {status.value} by {user.id}")
    return record


def remove_images(
    db: Session,
    media: MediaStore,
    user: CurrentUser | None,
    review_id: UUID,
    attachment_ids: Collection[UUID | str],
) -> ReviewImageAttachment | None:
    """Permanently delete some of a review's images.

    Returns:
        The updated record, or None if it no longer exists (or the caller may not moderate)
    """
    if not _can_moderate(user):
        logger.info(f"Review {review_id}: image removal denied")
        return None

    record = get_review_images(db, review_id)
    if record is None:
        return None

    to_remove = {str(i) for i in attachment_ids}
    if not to_remove:
        return record

    survivors = []
    for attachment_id in record.attachment_ids:
        if attachment_id in to_remove:
            media.delete(attachment_id, cascade=True)
        else:
            survivors.append(attachment_id)

    if not survivors:
        db.delete(record)
        db.flush()
        logger.info(f"Review {review_id}: removed all images")
        return None

    if len(survivors) != len(record.attachment_ids):
        record.attachment_ids = survivors
        db.flush()
        logger.info(f"Review {review_id}: {len(survivors)} image(s) left after removal")
    return record


def moderate(
    db: Session,
    media: MediaStore,
    user: CurrentUser | None,
    review_id: UUID,
    approved: bool,
    delete_ids: Collection[UUID | str] = (),
) -> ReviewImageAttachment | None:
    """Apply a moderation form: removals first, then the approval flag."""
    record = remove_images(db, media, user, review_id, delete_ids)
    if record is None:
        return None
    return approve(db, user, review_id, approved)


# =============================================================================
# Rendering
# =============================================================================


def visible_images(
    db: Session, media: MediaStore, review_id: UUID, config: ReviewSettings
) -> list[ReviewImage]:
    """Images to show under a review, in upload order.

    Visibility follows the current ``require_image_approval`` setting: when it is
    off, images show whatever status was stored at upload time.
    """
    record = get_review_images(db, review_id)
    if record is None:
        return []
    if config.require_image_approval and not record.is_approved:
        return []

    resolved = []
    for attachment_id in record.attachment_ids:
        thumbnail_url = media.resolve(attachment_id, "medium")
        full_url = media.resolve(attachment_id, "full")
        if not thumbnail_url:
            continue
        resolved.append((attachment_id, thumbnail_url, full_url or thumbnail_url))

    count = len(resolved)
    return [
        ReviewImage(
            id=attachment_id,
            thumbnail_url=thumbnail_url,
            full_url=full_url,
            position=position,
            previous_position=(position - 1) % count,
            next_position=(position + 1) % count,
        )
        for position, (attachment_id, thumbnail_url, full_url) in enumerate(resolved)
    ]


def moderation_images(db: Session, media: MediaStore, review_id: UUID) -> list[ModerationImage]:
    record = get_review_images(db, review_id)
    if record is None:
        return []
    images = []
    for attachment_id in record.attachment_ids:
        url = media.resolve(attachment_id, "thumbnail")
        if url:
            images.append(ModerationImage(id=attachment_id, thumbnail_url=url))
    return images


def moderation_summary(db: Session, media: MediaStore, review_id: UUID) -> ModerationSummary:
    """Status label and first thumbnails for the admin review list."""
    record = get_review_images(db, review_id)
    if record is None:
        return ModerationSummary(review_id=review_id, status_label="")

    thumbnails = [image.thumbnail_url for image in moderation_images(db, media, review_id)]
    return ModerationSummary(
        review_id=review_id,
        status=record.approval_status,
        status_label=STATUS_LABELS[record.approval_status],
        thumbnails=thumbnails[:MAX_ADMIN_THUMBNAILS],
    )
