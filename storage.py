"""S3-compatible object storage (MinIO locally, S3 in production)."""
import logging
import time

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from config import PRESIGN_EXPIRES, S3_ACCESS_KEY, S3_BUCKET, S3_ENDPOINT, S3_REGION, S3_SECRET_KEY

logger = logging.getLogger(__name__)

_client = None


def get_s3():
    global _client
    if _client is None:
        _client = boto3.client(
            "s3",
            endpoint_url=S3_ENDPOINT,
            region_name=S3_REGION,
            aws_access_key_id=S3_ACCESS_KEY,
            aws_secret_access_key=S3_SECRET_KEY,
            # MinIO needs path-style addressing
            config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
    return _client


def upload_key(user_id, filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1] if "." in filename else "bin"
    return f"uploads/{user_id}/{int(time.time() * 1000)}.{ext}"


def report_key(user_id) -> str:
    return f"reports/{user_id}/{int(time.time() * 1000)}.pdf"


def presign_upload(key: str, content_type: str) -> str:
    return get_s3().generate_presigned_url(
        "put_object",
        Params={"Bucket": S3_BUCKET, "Key": key, "ContentType": content_type},
        ExpiresIn=PRESIGN_EXPIRES,
    )


def presign_download(key: str) -> str:
    return get_s3().generate_presigned_url(
        "get_object",
        Params={"Bucket": S3_BUCKET, "Key": key},
        ExpiresIn=PRESIGN_EXPIRES,
    )


def put_pdf(key: str, body: bytes):
    get_s3().put_object(Bucket=S3_BUCKET, Key=key, Body=body, ContentType="application/pdf")


def get_object_bytes(key: str) -> bytes:
    return get_s3().get_object(Bucket=S3_BUCKET, Key=key)["Body"].read()


def delete_quietly(key: str | None) -> bool:
    """Best-effort delete; storage errors are logged and swallowed so row deletes still go through."""
    if not key:
        return False
    try:
        get_s3().delete_object(Bucket=S3_BUCKET, Key=key)
    except (BotoCoreError, ClientError) as e:
        logger.error("Failed to delete S3 object %s: %s", key, e)
        return False
    logger.info("Deleted S3 object: %s", key)
    return True


def is_user_upload(user_id, key: str) -> bool:
    """True when ``key`` lies under the prefix handed out by ``upload_key`` for this user."""
    return key.startswith(f"uploads/{user_id}/") and ".." not in key
