"""
Upload endpoints - listing photos.
Writes need an authenticated owner; reads are public because the front end
embeds these URLs from another origin.
"""

import mimetypes
from typing import Annotated

from fastapi import APIRouter, File, Request, UploadFile
from fastapi.responses import Response

from marketplace.config import get_settings
from marketplace.core.dependencies import CurrentIdentity, Media
from marketplace.schemas.media import UploadResponse
from marketplace.services.media_store import UploadedFile, owner_scope

router = APIRouter()
settings = get_settings()

MEDIA_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
    "Access-Control-Allow-Headers": "Content-Type",
    "Cross-Origin-Resource-Policy": "cross-origin",
    "Cross-Origin-Embedder-Policy": "credentialless",
}


@router.post("", response_model=UploadResponse, name="upload_media")
async def upload_media(
    request: Request,
    media: Media,
    identity: CurrentIdentity,
    images: Annotated[list[UploadFile] | None, File()] = None,
):
    """Multipart upload, field name `images`, up to 5 files of 5 MiB each."""
    files = []
    for upload in images or []:
        # One byte past the limit is enough to reject the file
        content = await upload.read(media.max_bytes + 1)
        files.append(UploadedFile(filename=upload.filename or "", content=content))
    base_url = settings.media_base_url or str(request.url_for("upload_media"))
    urls = await media.store(owner_scope(identity.uid), files, base_url)
    return UploadResponse(message="Files uploaded successfully", urls=urls)


@router.get("/{scope}/{name}", name="fetch_media")
async def fetch_media(media: Media, scope: str, name: str):
    """Serve a stored file with permissive cross-origin headers."""
    content = await media.retrieve(scope, name)
    media_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
    return Response(content=content, media_type=media_type, headers=MEDIA_HEADERS)
