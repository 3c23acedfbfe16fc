from reviews_design.routers.media import router as media_router
from reviews_design.routers.moderation import router as moderation_router
from reviews_design.routers.reviews import router as reviews_router
from reviews_design.routers.settings import router as settings_router

__all__ = [
    "media_router",
    "moderation_router",
    "reviews_router",
    "settings_router",
]
