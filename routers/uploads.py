from fastapi import APIRouter, Depends

import storage
from auth import get_current_user
from models import User
from schemas import PresignedUrlRequest

router = APIRouter(prefix="/api/storage", tags=["storage"])


@router.post("/presigned-url")
def presigned_url(body: PresignedUrlRequest, user: User = Depends(get_current_user)):
    key = storage.upload_key(user.id, body.filename)
    return {"upload_url": storage.presign_upload(key, body.content_type), "key": key}
