"""File repository functions."""

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from todolist.models.task import StoredFile
from todolist.repositories.base import persist


def get_all_files(db: Session) -> List[StoredFile]:
    return db.query(StoredFile).order_by(StoredFile.file_id).all()


def get_file_by_id(db: Session, file_id: int) -> Optional[StoredFile]:
    return db.query(StoredFile).filter(StoredFile.file_id == file_id).first()


def get_files_by_ids(db: Session, file_ids: Iterable[int]) -> List[StoredFile]:
    ids = list(file_ids)
    if not ids:
        return []
    return db.query(StoredFile).filter(StoredFile.file_id.in_(ids)).order_by(StoredFile.file_id).all()


def get_files_by_path(db: Session, file_path: str) -> List[StoredFile]:
    return db.query(StoredFile).filter(StoredFile.file_path == file_path).all()


def add_file(db: Session, filename: str, file_path: str) -> int:
    item = StoredFile(filename=filename, file_path=file_path)
    db.add(item)
    persist(db)
    return item.file_id


def update_file(db: Session, item: StoredFile, filename: str, file_path: str) -> StoredFile:
    item.filename = filename
    item.file_path = file_path
    persist(db)
    return item


def delete_file(db: Session, file_id: int) -> None:
    db.query(StoredFile).filter(StoredFile.file_id == file_id).delete(synchronize_session=False)
    persist(db)


def delete_files(db: Session, file_ids: Iterable[int]) -> None:
    ids = list(file_ids)
    if not ids:
        return
    db.query(StoredFile).filter(StoredFile.file_id.in_(ids)).delete(synchronize_session=False)
    persist(db)
