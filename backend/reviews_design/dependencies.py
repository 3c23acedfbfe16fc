from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from reviews_design.database import get_db
from reviews_design.schemas.settings import DiscussionSettings, ReviewSettings
from reviews_design.services.media import MediaStore
from reviews_design.services.options import load_discussion_settings, load_review_settings


def get_media_store(db: Session = Depends(get_db)) -> MediaStore:
    return MediaStore(db)


def get_review_settings(db: Session = Depends(get_db)) -> ReviewSettings:
    """Plugin settings, loaded once per request."""
    return load_review_settings(db)


def get_discussion_settings(db: Session = Depends(get_db)) -> DiscussionSettings:
    return load_discussion_settings(db)


Media = Annotated[MediaStore, Depends(get_media_store)]
CurrentReviewSettings = Annotated[ReviewSettings, Depends(get_review_settings)]
CurrentDiscussionSettings = Annotated[DiscussionSettings, Depends(get_discussion_settings)]
