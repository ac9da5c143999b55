from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse

from loan_console.api import deps
from loan_console.core.response_envelope import envelope
from loan_console.core.settings import settings
from loan_console.schemas.uploads import UploadKind
from loan_console.services.audit import record_admin_action
from loan_console.services.sessions import AdminSession
from loan_console.services.storage.adapter import LocalFileSystemAdapter, verify_local_url_signature
from loan_console.services.storage.service import UploadService, UploadTooLarge

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("", status_code=201)
async def upload_file(
    file: UploadFile = File(...),
    kind: UploadKind = Form(...),
    owner_id: str = Form(..., alias="ownerId", min_length=1, max_length=64),
    _: AdminSession = Depends(deps.get_current_session),
    service: UploadService = Depends(deps.get_upload_service),
) -> dict:
    try:
        result = await service.upload(file, kind, owner_id)
    except UploadTooLarge as exc:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    record_admin_action(
        action="upload.create",
        resource_type=kind.value,
        resource_id=owner_id,
        new_value={"objectKey": result.object_key, "sizeBytes": result.size_bytes},
    )
    return envelope(result.model_dump(by_alias=True), "File uploaded successfully", code="created")


@router.get("/local-content")
async def get_local_content(
    key: str = Query(...),
    expires: int = Query(...),
    signature: str = Query(...),
):
    if settings.storage_provider != "local":
        raise HTTPException(status_code=404, detail="Not supported")
    if not verify_local_url_signature(settings.secret_key, key, expires, signature):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired URL signature",
        )
    adapter = LocalFileSystemAdapter(base_path=settings.local_upload_dir, base_url="")
    try:
        path = adapter.resolve_path(key)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not path.exists():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path)
