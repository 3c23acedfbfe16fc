from uuid import UUID

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from reviews_design.dependencies import Media
from reviews_design.schemas import StandardError
from reviews_design.services.media import SIZE_VARIANTS

router = APIRouter()


@router.get(
    "/media/{attachment_id}/{variant}",
    summary="Get media file",
    description=f"Download a stored image. Variants: {', '.join(SIZE_VARIANTS)}.",
    responses={404: {"model": StandardError, "description": "Media or variant not found"}},
)
async def get_media_file(attachment_id: UUID, variant: str, media: Media):
    path = media.file_path(attachment_id, variant)
    if path is None:
        raise HTTPException(status_code=404, detail="Media not found")

    attachment = media.get(attachment_id)
    return FileResponse(path=path, media_type=attachment.content_type)
