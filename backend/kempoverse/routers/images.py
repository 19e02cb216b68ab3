import logging
import re
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from kempoverse.deps.auth import require_auth
from kempoverse.schemas.envelope import Envelope
from kempoverse.services.image_store import ALLOWED_IMAGE_TYPES, ImageStore, get_image_store, object_key
from kempoverse.settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/images", tags=["images"])

_SAFE_ID = re.compile(r"[A-Za-z0-9_-]{1,64}")

@router.post("/upload", response_model=Envelope[dict[str, str]], status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(require_auth)])
async def upload_image(
    entry_id: str | None = Form(None),
    image: UploadFile | None = File(None),
    store: ImageStore = Depends(get_image_store),
    settings: Settings = Depends(get_settings),
):
    if not entry_id or image is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing entry_id or image file")
    if not _SAFE_ID.fullmatch(entry_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid entry_id")
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Allowed: {', '.join(ALLOWED_IMAGE_TYPES)}",
        )

    # Read one byte past the limit so oversized uploads are caught without buffering them fully
    data = await image.read(settings.MAX_IMAGE_BYTES + 1)
    if len(data) > settings.MAX_IMAGE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large. Max size: {settings.MAX_IMAGE_BYTES // (1024 * 1024)}MB",
        )

    url = store.put(object_key(entry_id, image.filename), data, image.content_type)
    return {"data": {"url": url}}
