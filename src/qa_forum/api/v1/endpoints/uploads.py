# src/qa_forum/api/v1/endpoints/uploads.py
"""Image upload endpoint for the Q&A API."""

from fastapi import APIRouter, UploadFile, status

from qa_forum.api.v1.dependencies import AssetStoreDep, CurrentAccountDep
from qa_forum.schemas.upload import UploadResponse

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("/", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile,
    current_account: CurrentAccountDep,
    store: AssetStoreDep,
) -> UploadResponse:
    """Upload one image; the returned reference is attached to a later post."""
    data = await file.read(store.read_limit)
    asset = store.upload(data, file.filename or "upload", file.content_type)
    return UploadResponse(
        url=asset.url,
        public_id=asset.public_id,
        width=asset.width,
        height=asset.height,
        format=asset.format,
        size=asset.bytes,
    )
