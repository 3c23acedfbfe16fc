"""Tests for the public image grid of a review."""

import pytest

from reviews_design.models import ImageApprovalStatus, ReviewImageAttachment
from reviews_design.schemas.settings import ReviewSettings
from reviews_design.services.review_images import visible_images
from reviews_design.services.uploads import ALLOWED_IMAGE_TYPES

from conftest import make_descriptor, make_image_bytes


def attach(session, media, review, count, status, size=(64, 64)):
    ids = [
        str(media.ingest(make_descriptor(data=make_image_bytes(size=size)), review.subject_id, ALLOWED_IMAGE_TYPES))
        for _ in range(count)
    ]
    record = ReviewImageAttachment(review_id=review.id, attachment_ids=ids, approval_status=status)
    session.add(record)
    session.flush()
    return record


class TestVisibility:
    def test_no_record(self, session, media, review, images_enabled):
        assert visible_images(session, media, review.id, images_enabled) == []

    @pytest.mark.parametrize(
        "status,require_approval,visible",
        [
            (ImageApprovalStatus.PENDING, True, False),
            (ImageApprovalStatus.APPROVED, True, True),
            (ImageApprovalStatus.PENDING, False, True),
            (ImageApprovalStatus.APPROVED, False, True),
        ],
    )
    def test_status_and_setting(self, session, media, review, status, require_approval, visible):
        attach(session, media, review, 2, status)
        config = ReviewSettings(allow_images=True, require_image_approval=require_approval)

        images = visible_images(session, media, review.id, config)

        assert bool(images) is visible

    def test_visibility_follows_current_setting(self, session, media, review):
        attach(session, media, review, 1, ImageApprovalStatus.PENDING)

        hidden = visible_images(session, media, review.id, ReviewSettings(require_image_approval=True))
        shown = visible_images(session, media, review.id, ReviewSettings(require_image_approval=False))

        assert hidden == []
        assert len(shown) == 1

    def test_unresolvable_ids_skipped(self, session, media, review, images_enabled, uploads_dir):
        record = attach(session, media, review, 3, ImageApprovalStatus.APPROVED)
        gone = media.get(record.attachment_ids[1])
        (uploads_dir / gone.storage_path).unlink()

        images = visible_images(session, media, review.id, images_enabled)

        assert [str(image.id) for image in images] == [record.attachment_ids[0], record.attachment_ids[2]]
        assert [image.position for image in images] == [0, 1]


class TestGrid:
    def test_upload_order_and_urls(self, session, media, review, images_enabled):
        record = attach(session, media, review, 3, ImageApprovalStatus.APPROVED, size=(640, 480))

        images = visible_images(session, media, review.id, images_enabled)

        assert [str(image.id) for image in images] == record.attachment_ids
        first = images[0]
        assert first.thumbnail_url == f"/api/v1/media/{first.id}/medium"
        assert first.full_url == f"/api/v1/media/{first.id}/full"

    def test_cyclic_navigation(self, session, media, review, images_enabled):
        attach(session, media, review, 3, ImageApprovalStatus.APPROVED)

        images = visible_images(session, media, review.id, images_enabled)

        assert [(i.previous_position, i.next_position) for i in images] == [(2, 1), (0, 2), (1, 0)]

    def test_single_image_points_to_itself(self, session, media, review, images_enabled):
        attach(session, media, review, 1, ImageApprovalStatus.APPROVED)

        (image,) = visible_images(session, media, review.id, images_enabled)

        assert image.previous_position == image.next_position == image.position == 0
