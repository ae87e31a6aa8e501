"""Files API router: upload staging, attachment retrieval and orphan cleanup."""

from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from todolist.config import settings
from todolist.database import get_db
from todolist.middleware.auth_middleware import get_current_user, require_admin
from todolist.models.user import User
from todolist.schemas.file import DiscardRequest, OrphanCleanupOut, TempUploadedFile
from todolist.services import attachment_service

router = APIRouter(prefix="/api/files", tags=["files"])


def _inline_disposition(filename: str) -> str:
    if filename.isascii() and "\"" not in filename:
        return f"inline; filename={filename}"
    return f"inline; filename*=UTF-8''{quote(filename)}"


@router.post("/upload-temp", response_model=TempUploadedFile)
async def upload_temp_file(
    file: UploadFile = File(...),
    _current_user: User = Depends(get_current_user),
):
    content = await file.read()
    return attachment_service.stage_upload(content, file.content_type or "", file.filename or "")


@router.delete("/upload-temp")
def discard_temp_file(data: DiscardRequest, _current_user: User = Depends(get_current_user)):
    attachment_service.discard_upload(data.temp_file_path)
    return {"message": "Discarded."}


@router.post("/orphans/cleanup", response_model=OrphanCleanupOut)
def cleanup_orphans(
    dry_run: bool = True,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_admin),
):
    return attachment_service.cleanup_orphan_attachments(db, dry_run=dry_run)


@router.get("/{file_id}")
def get_file(file_id: int, db: Session = Depends(get_db), _current_user: User = Depends(get_current_user)):
    stored = attachment_service.get_stored_file(db, file_id)
    return FileResponse(
        stored.file_path,
        media_type=settings.ACCEPTED_CONTENT_TYPE,
        headers={"Content-Disposition": _inline_disposition(stored.filename)},
    )
