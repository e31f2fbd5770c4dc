from fastapi import APIRouter, Depends, File, Query, UploadFile
import logging

from models.user import User
from routers.dependencies import get_blob_store, get_current_user
from utils.s3 import (
    DOCUMENT_CONTENT_TYPES,
    DOCUMENT_PREFIX,
    IMAGE_CONTENT_TYPES,
    IMAGE_PREFIX,
    S3BlobStore
)
from api.models.responses.user import UploadResponse
from api.models.responses.flashcard_set import DeleteResponse

logger = logging.getLogger(__name__)

router = APIRouter()

async def _store(
    file: UploadFile,
    user: User,
    store: S3BlobStore,
    prefix: str,
    allowed_types: set
) -> UploadResponse:
    data = await file.read()
    content_type = file.content_type or ""
    store.validate(data, content_type, allowed_types)

    key = store.generate_key(prefix, user.id, file.filename)
    url = store.put(data, content_type, key)
    logger.info(f"User {user.id} uploaded {len(data)} bytes to {key}")
    return UploadResponse(
        url=url,
        key=key,
        filename=file.filename or key.rsplit('/', 1)[-1],
        content_type=content_type
    )

@router.post("/image", response_model=UploadResponse)
async def upload_image(
    image: UploadFile = File(..., description="Image for a flashcard"),
    user: User = Depends(get_current_user),
    store: S3BlobStore = Depends(get_blob_store)
):
    return await _store(image, user, store, IMAGE_PREFIX, IMAGE_CONTENT_TYPES)

@router.post("/document", response_model=UploadResponse)
async def upload_document(
    document: UploadFile = File(..., description="Source document for flashcard generation"),
    user: User = Depends(get_current_user),
    store: S3BlobStore = Depends(get_blob_store)
):
    return await _store(document, user, store, DOCUMENT_PREFIX, DOCUMENT_CONTENT_TYPES | IMAGE_CONTENT_TYPES)

@router.delete("", response_model=DeleteResponse)
async def delete_upload(
    key: str = Query(..., min_length=1, description="Storage key returned by the upload"),
    user: User = Depends(get_current_user),
    store: S3BlobStore = Depends(get_blob_store)
):
    """Delete one of the caller's uploads."""
    store.delete(key, user_id=user.id)
    return DeleteResponse(message="File deleted successfully")
