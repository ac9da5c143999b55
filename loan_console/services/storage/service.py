import asyncio
import logging
import mimetypes
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile

from loan_console.core.settings import settings
from loan_console.schemas.uploads import UploadKind, UploadResult
from loan_console.services.storage.adapter import (
    LocalFileSystemAdapter,
    S3StorageAdapter,
    StorageAdapter,
)
from loan_console.services.storage.key_generator import KeyGenerator

logger = logging.getLogger(__name__)

# Magic byte signatures used to cross-check content against the claimed extension.
_MAGIC_SIGNATURES: dict[str, list[bytes]] = {
    ".pdf": [b"%PDF"],
    ".png": [b"\x89PNG\r\n\x1a\n"],
    ".jpg": [b"\xff\xd8\xff"],
    ".jpeg": [b"\xff\xd8\xff"],
    ".webp": [b"RIFF"],
}

ALLOWED_EXTENSIONS: dict[str, set[str]] = {
    UploadKind.PAYMENT_ATTACHMENT.value: {".pdf", ".png", ".jpg", ".jpeg", ".webp"},
    UploadKind.KYC_DOCUMENT.value: {".pdf", ".png", ".jpg", ".jpeg"},
    UploadKind.LOAN_DOCUMENT.value: {".pdf", ".png", ".jpg", ".jpeg"},
}


class UploadTooLarge(ValueError):
    pass


def get_storage_adapter() -> StorageAdapter:
    if settings.storage_provider == "s3":
        if not settings.s3_bucket:
            raise ValueError("S3 bucket is not configured")
        return S3StorageAdapter(
            bucket=settings.s3_bucket,
            region=settings.aws_region,
            identity_pool_id=settings.cognito_identity_pool_id,
        )

    return LocalFileSystemAdapter(
        base_path=settings.local_upload_dir,
        base_url=settings.public_base_url,
        signing_key=settings.secret_key,
    )


def _validate_content(content: bytes, ext: str) -> None:
    signatures = _MAGIC_SIGNATURES.get(ext)
    if signatures and not any(content.startswith(sig) for sig in signatures):
        raise ValueError(f"File content does not match the expected format for '{ext}'")


def _content_type_for(filename: str, declared: str | None) -> str:
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or declared or "application/octet-stream"


class UploadService:
    def __init__(self, adapter: StorageAdapter, *, max_size_bytes: int | None = None):
        self.adapter = adapter
        self.max_size_bytes = max_size_bytes or settings.upload_max_bytes

    async def _read_limited(self, file: UploadFile) -> bytes:
        content = await file.read(self.max_size_bytes + 1)
        if len(content) > self.max_size_bytes:
            raise UploadTooLarge(
                f"File exceeds maximum allowed size of {self.max_size_bytes // (1024 * 1024)} MB"
            )
        return content

    async def upload(self, file: UploadFile, kind: UploadKind | str, owner_id: str) -> UploadResult:
        kind = UploadKind(kind).value
        file_name = Path(file.filename or "").name or "upload.bin"
        ext = Path(file_name).suffix.lower()
        allowed = ALLOWED_EXTENSIONS[kind]
        if ext not in allowed:
            raise ValueError(f"File type not allowed. Allowed extensions: {', '.join(sorted(allowed))}")

        try:
            content = await self._read_limited(file)
        finally:
            await file.close()
        if not content:
            raise ValueError("Uploaded file is empty")
        _validate_content(content, ext)

        object_key = KeyGenerator.generate_object_key(kind, owner_id, uuid4(), file_name)
        content_type = _content_type_for(file_name, file.content_type)
        url = await asyncio.to_thread(self.adapter.put_object, object_key, content, content_type)
        logger.info(
            "Stored upload kind=%s key=%s provider=%s bytes=%s",
            kind,
            object_key,
            self.adapter.provider,
            len(content),
        )
        return UploadResult(
            url=url,
            object_key=object_key,
            storage_provider=self.adapter.provider,
            storage_bucket=self.adapter.bucket,
            file_name=file_name,
            content_type=content_type,
            size_bytes=len(content),
        )
