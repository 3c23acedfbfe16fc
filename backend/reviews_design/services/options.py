"""Key-value option store and typed accessors for review settings.

Plugin settings live in one JSON document under ``SETTINGS_OPTION``. The
store-level discussion settings use their own keys so other parts of the
storefront can read them without knowing about this plugin.
"""

import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from reviews_design.models.option import Option
from reviews_design.schemas.settings import DiscussionSettings, ReviewSettings

logger = logging.getLogger(__name__)

SETTINGS_OPTION = "reviews_design_settings"
THEME_PALETTE_OPTION = "theme_palette"

# Discussion option keys
ENABLE_REVIEWS_OPTION = "enable_reviews"
PAGE_COMMENTS_OPTION = "page_comments"
COMMENTS_PER_PAGE_OPTION = "comments_per_page"
DEFAULT_COMMENTS_PAGE_OPTION = "default_comments_page"
COMMENT_ORDER_OPTION = "comment_order"


def get_option(db: Session, key: str, default: Any = None) -> Any:
    option = db.get(Option, key)
    if option is None or option.value is None:
        return default
    return option.value


def update_option(db: Session, key: str, value: Any) -> None:
    option = db.get(Option, key)
    if option is None:
        db.add(Option(key=key, value=value))
    else:
        option.value = value
    db.flush()


def delete_option(db: Session, key: str) -> bool:
    option = db.get(Option, key)
    if option is None:
        return False
    db.delete(option)
    db.flush()
    return True


def load_review_settings(db: Session) -> ReviewSettings:
    """Load plugin settings, falling back to defaults for a missing or malformed document."""
    raw = get_option(db, SETTINGS_OPTION, {})
    if not isinstance(raw, dict):
        raw = {}
    try:
        return ReviewSettings.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Stored review settings are invalid, using defaults: {e}")
        return ReviewSettings()


def save_review_settings(db: Session, review_settings: ReviewSettings) -> None:
    update_option(db, SETTINGS_OPTION, review_settings.model_dump(mode="json"))


def load_discussion_settings(db: Session) -> DiscussionSettings:
    defaults = DiscussionSettings()
    raw = {
        "enable_reviews": get_option(db, ENABLE_REVIEWS_OPTION, defaults.enable_reviews),
        "page_comments": get_option(db, PAGE_COMMENTS_OPTION, defaults.page_comments),
        "comments_per_page": get_option(db, COMMENTS_PER_PAGE_OPTION, defaults.comments_per_page),
        "default_comments_page": get_option(
            db, DEFAULT_COMMENTS_PAGE_OPTION, defaults.default_comments_page.value
        ),
        "comment_order": get_option(db, COMMENT_ORDER_OPTION, defaults.comment_order.value),
    }
    try:
        return DiscussionSettings.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Stored discussion settings are invalid, using defaults: {e}")
        return defaults


def save_discussion_settings(db: Session, discussion: DiscussionSettings) -> None:
    update_option(db, ENABLE_REVIEWS_OPTION, discussion.enable_reviews)
    update_option(db, PAGE_COMMENTS_OPTION, discussion.page_comments)
    update_option(db, COMMENTS_PER_PAGE_OPTION, discussion.comments_per_page)
    update_option(db, DEFAULT_COMMENTS_PAGE_OPTION, discussion.default_comments_page.value)
    update_option(db, COMMENT_ORDER_OPTION, discussion.comment_order.value)


def load_theme_palette(db: Session) -> list[dict[str, Any]]:
    """Color palette declared by the active storefront theme, as ``{slug, color}`` entries."""
    palette = get_option(db, THEME_PALETTE_OPTION, [])
    return palette if isinstance(palette, list) else []


def install_defaults(db: Session) -> bool:
    """Store default plugin settings unless a settings document already exists.

    Returns:
        True when defaults were written
    """
    if get_option(db, SETTINGS_OPTION) is not None:
        return False
    save_review_settings(db, ReviewSettings())
    logger.info("Installed default review settings")
    return True


def uninstall(db: Session) -> None:
    """Remove plugin settings. Review image records and media are left in place."""
    if delete_option(db, SETTINGS_OPTION):
        logger.info("Removed review settings")
