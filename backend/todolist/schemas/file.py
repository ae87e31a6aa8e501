"""Pydantic schemas for staged uploads and stored attachments."""

from pydantic import BaseModel


class TempUploadedFile(BaseModel):
    temp_file_path: str
    file_name: str
    content_type: str
    size: int


class DiscardRequest(BaseModel):
    temp_file_path: str


class StoredFileOut(BaseModel):
    file_id: int
    filename: str

    model_config = {"from_attributes": True}


class OrphanCleanupOut(BaseModel):
    dry_run: bool
    referenced_count: int
    existing_count: int
    orphan_count: int
    deleted_count: int
    orphan_paths: list[str]
