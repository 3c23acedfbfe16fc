import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from reviews_design.auth import RequireStoreManager
from reviews_design.database import get_db
from reviews_design.schemas import (
    DiscussionSettings,
    ReviewSettings,
    SettingsResponse,
    SettingsUpdate,
    StandardError,
)
from reviews_design.services.options import (
    load_discussion_settings,
    load_review_settings,
    load_theme_palette,
    save_discussion_settings,
    save_review_settings,
)
from reviews_design.services.palette import base_palette, resolve_colors, sanitize_colors
from reviews_design.services.uploads import sanitize_subdir

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_settings_response(db: Session) -> SettingsResponse:
    review_settings = load_review_settings(db)
    theme_palette = load_theme_palette(db)
    review_settings.colors = resolve_colors(review_settings.colors, theme_palette)
    return SettingsResponse(
        settings=review_settings,
        discussion=load_discussion_settings(db),
        base_palette=base_palette(theme_palette),
    )


@router.get(
    "/settings",
    response_model=SettingsResponse,
    summary="Get review settings",
    description="Effective review settings, discussion settings and the fallback palette.",
    responses={
        401: {"model": StandardError, "description": "Unauthorized"},
        403: {"model": StandardError, "description": "Missing store management capability"},
    },
)
async def get_settings(user: RequireStoreManager, db: Session = Depends(get_db)):
    return _build_settings_response(db)


@router.put(
    "/settings",
    response_model=SettingsResponse,
    summary="Save review settings",
    description="""
Save the settings page.

Every color role is stored on save: a field that is empty or not a valid hex
color takes the base palette value (theme palette over plugin defaults).
    """,
    responses={
        401: {"model": StandardError, "description": "Unauthorized"},
        403: {"model": StandardError, "description": "Missing store management capability"},
    },
)
async def update_settings(
    update: SettingsUpdate, user: RequireStoreManager, db: Session = Depends(get_db)
):
    review_settings = ReviewSettings(
        colors=sanitize_colors(update.colors, load_theme_palette(db)),
        show_website_field=update.show_website_field,
        allow_images=update.allow_images,
        allow_images_guests=update.allow_images_guests,
        require_image_approval=update.require_image_approval,
        images_subdir=sanitize_subdir(update.images_subdir),
    )
    save_review_settings(db, review_settings)

    save_discussion_settings(
        db,
        DiscussionSettings(
            enable_reviews=update.enable_reviews,
            page_comments=update.page_comments,
            comments_per_page=update.comments_per_page,
            default_comments_page=update.default_comments_page,
            comment_order=update.comment_order,
        ),
    )
    logger.info(f"Review settings saved by {user.id}")

    # Reload so the response reflects what was stored
    return _build_settings_response(db)
