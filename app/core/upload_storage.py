import uuid
from dataclasses import dataclass
from enum import Enum
from io import BytesIO

from fastapi import UploadFile
from minio import Minio

from app.core.config import Settings, get_settings
from app.core.errors import ValidationError
from app.core.minio_client import ensure_bucket, get_minio, get_presigned_url

MB = 1024 * 1024

IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})


class UploadKind(str, Enum):
    PHOTO = "photo"
    PAYMENT_PROOF = "payment_proof"


@dataclass(frozen=True)
class UploadRule:
    content_types: frozenset
    max_bytes: int


UPLOAD_RULES = {
    UploadKind.PHOTO: UploadRule(IMAGE_TYPES, 5 * MB),
    UploadKind.PAYMENT_PROOF: UploadRule(IMAGE_TYPES | {"application/pdf"}, 10 * MB),
}


def _too_large(rule: UploadRule) -> ValidationError:
    return ValidationError(f"File too large. Maximum size is {rule.max_bytes // MB} MB")


def validate_upload(kind: UploadKind, content_type: str | None, size: int) -> None:
    rule = UPLOAD_RULES[kind]
    if (content_type or "").lower() not in rule.content_types:
        allowed = ", ".join(sorted(rule.content_types))
        raise ValidationError(f"Unsupported file type. Allowed: {allowed}")
    if size <= 0:
        raise ValidationError("File is empty")
    if size > rule.max_bytes:
        raise _too_large(rule)


async def read_upload(kind: UploadKind, file: UploadFile) -> bytes:
    """Reads at most one byte past the cap, so oversized bodies are never buffered whole."""
    rule = UPLOAD_RULES[kind]
    if file.size is not None and file.size > rule.max_bytes:
        raise _too_large(rule)
    data = await file.read(rule.max_bytes + 1)
    if len(data) > rule.max_bytes:
        raise _too_large(rule)
    return data


class UploadStore:
    """
    Puts validated files into MinIO under {kind}/{owner_id}/{uuid}.ext
    and returns a public or presigned URL.
    """

    def __init__(self, minio: Minio, buckets: dict, public_base: str | None = None) -> None:
        self.minio = minio
        self.buckets = buckets
        self.public_base = (public_base or "").rstrip("/")

    async def save(self, kind: UploadKind, data: bytes, content_type: str, filename: str, owner_id: str) -> str:
        validate_upload(kind, content_type, len(data))

        bucket = self.buckets[kind]
        ensure_bucket(self.minio, bucket)

        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        object_name = f"{kind.value}/{owner_id}/{uuid.uuid4().hex}.{ext}"

        # MinIO SDK is sync; fine for files capped at 10 MB.
        self.minio.put_object(
            bucket,
            object_name,
            BytesIO(data),
            length=len(data),
            content_type=content_type,
        )

        if self.public_base:
            return f"{self.public_base}/{bucket}/{object_name}"
        return get_presigned_url(self.minio, bucket, object_name)


def build_upload_store(settings: Settings) -> UploadStore:
    return UploadStore(
        get_minio(settings),
        buckets={
            UploadKind.PHOTO: settings.MINIO_BUCKET_PHOTOS,
            UploadKind.PAYMENT_PROOF: settings.MINIO_BUCKET_PAYMENTS,
        },
        public_base=settings.MINIO_PUBLIC_BASE,
    )


def get_upload_store() -> UploadStore:
    return build_upload_store(get_settings())
