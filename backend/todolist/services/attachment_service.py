"""Upload staging, attachment retrieval and orphan reconciliation."""

import logging
import os

from sqlalchemy.orm import Session

from todolist.config import settings
from todolist.errors import NotFound, ValidationFailure
from todolist.models.task import StoredFile
from todolist.repositories import file_repository
from todolist.schemas.file import TempUploadedFile
from todolist.services.attachment_store import AttachmentStore, store as default_store

logger = logging.getLogger(__name__)


def stage_upload(content: bytes, content_type: str, filename: str, store: AttachmentStore = default_store) -> TempUploadedFile:
    if not content:
        raise ValidationFailure("No file uploaded.")
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise ValidationFailure("File exceeds the upload size limit.")
    staged = store.stage_upload(content, content_type, filename)
    logger.info("[attachments] staged %s (%d bytes)", staged.file_name, staged.size)
    return staged


def discard_upload(temp_file_path: str, store: AttachmentStore = default_store) -> None:
    if not store.is_staged_path(temp_file_path):
        raise ValidationFailure("Not a staged upload.")
    store.discard(temp_file_path)


def get_stored_file(db: Session, file_id: int) -> StoredFile:
    stored = file_repository.get_file_by_id(db, file_id)
    if stored is None or not os.path.isfile(stored.file_path):
        raise NotFound("File not found.")
    return stored


def cleanup_orphan_attachments(db: Session, dry_run: bool = True, store: AttachmentStore = default_store) -> dict:
    referenced = {os.path.abspath(row.file_path) for row in file_repository.get_all_files(db)}
    existing = set(store.iter_permanent_files())
    orphan_paths = sorted(existing - referenced)

    deleted_count = 0
    if not dry_run:
        for path in orphan_paths:
            if os.path.exists(path):
                store.delete_permanent(path)
                deleted_count += 1
        _remove_empty_dirs(store)
        logger.info("[attachments] removed %d orphaned file(s)", deleted_count)

    return {
        "dry_run": dry_run,
        "referenced_count": len(referenced),
        "existing_count": len(existing),
        "orphan_count": len(orphan_paths),
        "deleted_count": deleted_count,
        "orphan_paths": orphan_paths,
    }


def _remove_empty_dirs(store: AttachmentStore):
    root = store.attachment_root
    if not os.path.exists(root):
        return
    for dirpath, dirnames, filenames in os.walk(root, topdown=False):
        if dirpath == root or dirnames or filenames:
            continue
        store.remove_empty_directory(dirpath)
