"""Filesystem storage for uploaded task attachments.

Uploads are first staged under the temporary upload directory with a random
name and later promoted (moved) into ``<ATTACHMENT_ROOT>/<task_id>/<name>``
when the task write that references them commits.
"""

import errno
import logging
import os
import re
import shutil
import tempfile
import uuid
from typing import Iterator, Optional

from todolist.config import settings
from todolist.errors import IOFailure, UnsupportedMediaType, ValidationFailure
from todolist.schemas.file import TempUploadedFile

logger = logging.getLogger(__name__)

STAGED_NAME_RE = re.compile(r"^[0-9a-f]{32}\.pdf$")
DEFAULT_FILE_NAME = "attachment.pdf"


def safe_file_name(name: str | None) -> str:
    # Browsers may send a full client path; only the final component is kept.
    base = os.path.basename(str(name or "").replace("\\", "/")).strip()
    if base in {"", ".", ".."}:
        return DEFAULT_FILE_NAME
    return base


class AttachmentStore:
    def __init__(self, attachment_root: Optional[str] = None, temp_dir: Optional[str] = None):
        self._attachment_root = attachment_root
        self._temp_dir = temp_dir

    @property
    def attachment_root(self) -> str:
        return os.path.abspath(self._attachment_root or settings.ATTACHMENT_ROOT)

    @property
    def temp_dir(self) -> str:
        return os.path.abspath(self._temp_dir or settings.TEMP_UPLOAD_DIR or tempfile.gettempdir())

    def task_directory(self, task_id: int) -> str:
        return os.path.join(self.attachment_root, str(task_id))

    def ensure_directories(self) -> None:
        try:
            os.makedirs(self.attachment_root, exist_ok=True)
            os.makedirs(self.temp_dir, exist_ok=True)
        except OSError as exc:
            raise IOFailure(f"Could not create attachment storage: {exc}") from exc

    def stage_upload(self, content: bytes, content_type: str, original_name: str) -> TempUploadedFile:
        if content_type != settings.ACCEPTED_CONTENT_TYPE:
            raise UnsupportedMediaType(f"Only PDF files are allowed, got '{content_type}'.")

        try:
            os.makedirs(self.temp_dir, exist_ok=True)
            temp_path = os.path.join(self.temp_dir, f"{uuid.uuid4().hex}.pdf")
            # "xb" refuses to clobber an existing staged file
            with open(temp_path, "xb") as f:
                f.write(content)
        except OSError as exc:
            raise IOFailure(f"Could not stage upload '{original_name}': {exc}") from exc

        return TempUploadedFile(
            temp_file_path=temp_path,
            file_name=safe_file_name(original_name),
            content_type=content_type,
            size=len(content),
        )

    def is_staged_path(self, path: str) -> bool:
        real = os.path.realpath(path)
        return (
            os.path.dirname(real) == os.path.realpath(self.temp_dir)
            and STAGED_NAME_RE.match(os.path.basename(real)) is not None
        )

    def check_file_name(self, name: str) -> None:
        """Refuse names that would resolve outside the task directory."""
        if not name or name != safe_file_name(name):
            raise ValidationFailure(f"Invalid attachment file name '{name}'.")

    def promote(self, temp_path: str, destination_directory: str, destination_name: str) -> str:
        self.check_file_name(destination_name)
        if not os.path.isfile(temp_path):
            raise IOFailure(f"Staged file '{temp_path}' does not exist.")
        try:
            os.makedirs(destination_directory, exist_ok=True)
        except OSError as exc:
            raise IOFailure(f"Could not create '{destination_directory}': {exc}") from exc

        destination = os.path.join(os.path.abspath(destination_directory), destination_name)
        self._move(temp_path, destination)
        return destination

    def demote(self, permanent_path: str, temp_path: str) -> None:
        """Move a promoted binary back to its staging path."""
        self._move(permanent_path, temp_path)

    def set_aside(self, path: str) -> Optional[str]:
        """Rename an existing binary out of the way so it can be restored later."""
        if not os.path.exists(path):
            return None
        backup = f"{path}.{uuid.uuid4().hex}.bak"
        try:
            os.replace(path, backup)
        except OSError as exc:
            raise IOFailure(f"Could not set aside '{path}': {exc}") from exc
        return backup

    def restore(self, backup_path: str, path: str) -> None:
        try:
            os.replace(backup_path, path)
        except OSError as exc:
            raise IOFailure(f"Could not restore '{path}': {exc}") from exc

    def discard(self, temp_path: str) -> None:
        try:
            os.remove(temp_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("[attachments] could not discard staged file %s: %s", temp_path, exc)

    def delete_permanent(self, path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("[attachments] could not delete %s, left as orphan: %s", path, exc)

    def remove_empty_directory(self, path: str) -> None:
        try:
            os.rmdir(path)
        except OSError:
            # Not empty or already gone.
            pass

    def iter_permanent_files(self) -> Iterator[str]:
        root = self.attachment_root
        if not os.path.exists(root):
            return
        for dirpath, _, filenames in os.walk(root):
            for filename in filenames:
                yield os.path.join(dirpath, filename)

    def _move(self, source: str, destination: str) -> None:
        try:
            os.replace(source, destination)
            return
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise IOFailure(f"Could not move '{source}' to '{destination}': {exc}") from exc

        # Different filesystems: copy next to the destination, then swap it in
        # atomically so a failed copy never leaves a truncated destination.
        partial = f"{destination}.{uuid.uuid4().hex}.partial"
        try:
            shutil.copyfile(source, partial)
            os.replace(partial, destination)
        except OSError as exc:
            try:
                os.remove(partial)
            except OSError:
                pass
            raise IOFailure(f"Could not move '{source}' to '{destination}': {exc}") from exc

        try:
            os.remove(source)
        except OSError as exc:
            logger.warning("[attachments] moved %s but could not remove the source: %s", source, exc)


store = AttachmentStore()
