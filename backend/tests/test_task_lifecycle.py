"""Task lifecycle: rows, attachments and rollback behaviour."""

import os
from datetime import date

import pytest
from sqlalchemy.exc import SQLAlchemyError

from todolist.errors import NotFound, PermissionDenied, TransactionFailure, ValidationFailure
from todolist.models.task import StoredFile, Task, TaskFile
from todolist.repositories import task_file_repository, task_repository
from todolist.schemas.file import TempUploadedFile
from todolist.schemas.task import TaskCreate, TaskUpdate
from todolist.services import task_service
from tests.conftest import PDF_BYTES, stage_pdf


def _create_payload(seed_lookups, staged=(), department=None, **overrides) -> TaskCreate:
    payload = {
        "subject": "Audit",
        "action": "Review the ledger",
        "due_date": date(2026, 5, 1),
        "department_id": department if department is not None else seed_lookups["hr"].department_id,
        "task_status_id": seed_lookups["open"].task_status_id,
        "staged_files": list(staged),
    }
    payload.update(overrides)
    return TaskCreate(**payload)


def _update_payload(task: Task, staged=(), removed=(), **overrides) -> TaskUpdate:
    payload = {
        "subject": task.subject,
        "action": task.action,
        "due_date": task.due_date,
        "department_id": task.department_id,
        "task_status_id": task.task_status_id,
        "staged_files": list(staged),
        "removed_file_ids": list(removed),
    }
    payload.update(overrides)
    return TaskUpdate(**payload)


def _fail_linking(monkeypatch):
    def boom(*args, **kwargs):
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(task_file_repository, "add_task_file", boom)


def _read(path) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def test_create_with_attachments_persists_rows_and_binaries(db, store, seed_users, seed_lookups):
    staged = [stage_pdf(store, "a.pdf"), stage_pdf(store, "b.pdf")]

    task = task_service.create_task(db, _create_payload(seed_lookups, staged), seed_users["admin"], store)

    links = db.query(TaskFile).filter(TaskFile.task_id == task.task_id).all()
    assert len(links) == 2
    assert db.query(StoredFile).count() == 2
    task_dir = store.task_directory(task.task_id)
    assert sorted(os.listdir(task_dir)) == ["a.pdf", "b.pdf"]
    for item in staged:
        assert not os.path.exists(item.temp_file_path)


def test_create_without_attachments(db, store, seed_users, seed_lookups):
    task = task_service.create_task(db, _create_payload(seed_lookups), seed_users["admin"], store)
    assert task.department_id == seed_lookups["hr"].department_id
    assert db.query(StoredFile).count() == 0


def test_non_admin_without_department_files_under_own(db, store, seed_users, seed_lookups):
    task = task_service.create_task(db, _create_payload(seed_lookups, department=0), seed_users["it_user"], store)
    assert task.department_id == seed_lookups["it"].department_id


def test_create_with_unknown_status_rolls_back(db, store, seed_users, seed_lookups):
    staged = stage_pdf(store)
    payload = _create_payload(seed_lookups, [staged], task_status_id=999)

    with pytest.raises(NotFound):
        task_service.create_task(db, payload, seed_users["admin"], store)

    assert db.query(Task).count() == 0
    assert os.path.exists(staged.temp_file_path)


def test_create_failure_after_promotion_restores_staged_files(db, store, seed_users, seed_lookups, monkeypatch):
    staged = stage_pdf(store)
    _fail_linking(monkeypatch)

    with pytest.raises(TransactionFailure) as excinfo:
        task_service.create_task(db, _create_payload(seed_lookups, [staged]), seed_users["admin"], store)

    assert isinstance(excinfo.value.__cause__, SQLAlchemyError)
    assert db.query(Task).count() == 0
    assert db.query(StoredFile).count() == 0
    assert db.query(TaskFile).count() == 0
    assert _read(staged.temp_file_path) == PDF_BYTES
    assert list(store.iter_permanent_files()) == []


def test_create_refuses_paths_outside_staging(db, store, seed_users, seed_lookups, tmp_path):
    outside = tmp_path / "secret.pdf"
    outside.write_bytes(PDF_BYTES)
    forged = TempUploadedFile(temp_file_path=str(outside), file_name="x.pdf", content_type="application/pdf", size=1)

    with pytest.raises(ValidationFailure):
        task_service.create_task(db, _create_payload(seed_lookups, [forged]), seed_users["admin"], store)
    assert outside.exists()
    assert db.query(Task).count() == 0


@pytest.mark.parametrize("file_name", ["..", ".", "nested/evil.pdf", "/etc/passwd"])
def test_create_refuses_unsafe_file_names_before_touching_disk(
    db, store, seed_users, seed_lookups, monkeypatch, file_name
):
    staged = stage_pdf(store).model_copy(update={"file_name": file_name})
    set_aside_calls = []
    monkeypatch.setattr(store, "set_aside", lambda path: set_aside_calls.append(path))

    with pytest.raises(ValidationFailure):
        task_service.create_task(db, _create_payload(seed_lookups, [staged]), seed_users["admin"], store)

    assert set_aside_calls == []
    assert db.query(Task).count() == 0
    assert os.path.exists(staged.temp_file_path)


def test_update_refuses_unsafe_file_name(db, store, seed_users, seed_lookups, monkeypatch):
    task = task_service.create_task(
        db, _create_payload(seed_lookups, [stage_pdf(store, "a.pdf")]), seed_users["admin"], store
    )
    staged = stage_pdf(store).model_copy(update={"file_name": ".."})
    set_aside_calls = []
    monkeypatch.setattr(store, "set_aside", lambda path: set_aside_calls.append(path))

    with pytest.raises(ValidationFailure):
        task_service.update_task(db, task.task_id, _update_payload(task, [staged]), seed_users["admin"], store)

    assert set_aside_calls == []
    assert os.listdir(store.task_directory(task.task_id)) == ["a.pdf"]


def test_update_replaces_removed_attachment(db, store, seed_users, seed_lookups):
    task = task_service.create_task(
        db, _create_payload(seed_lookups, [stage_pdf(store, "old.pdf")]), seed_users["admin"], store
    )
    old_file = task_service.get_task_files(db, task.task_id)[0]
    old_path = old_file.file_path
    old_id = old_file.file_id

    new_staged = stage_pdf(store, "new.pdf")
    task_service.update_task(
        db,
        task.task_id,
        _update_payload(task, staged=[new_staged], removed=[old_id], task_status_id=seed_lookups["done"].task_status_id),
        seed_users["admin"],
        store,
    )

    files = task_service.get_task_files(db, task.task_id)
    assert [f.filename for f in files] == ["new.pdf"]
    assert db.query(StoredFile).filter(StoredFile.file_id == old_id).count() == 0
    assert db.query(TaskFile).filter(TaskFile.file_id == old_id).count() == 0
    assert not os.path.exists(old_path)
    assert os.path.exists(files[0].file_path)
    assert task_service.get_task(db, task.task_id).task_status_id == seed_lookups["done"].task_status_id


def test_update_removing_and_readding_same_name_keeps_new_binary(db, store, seed_users, seed_lookups):
    task = task_service.create_task(
        db, _create_payload(seed_lookups, [stage_pdf(store, "plan.pdf", b"%PDF-v1")]), seed_users["admin"], store
    )
    old_id = task_service.get_task_files(db, task.task_id)[0].file_id

    task_service.update_task(
        db,
        task.task_id,
        _update_payload(task, staged=[stage_pdf(store, "plan.pdf", b"%PDF-v2")], removed=[old_id]),
        seed_users["admin"],
        store,
    )

    files = task_service.get_task_files(db, task.task_id)
    assert len(files) == 1
    assert _read(files[0].file_path) == b"%PDF-v2"


def test_update_same_name_supersedes_existing_row(db, store, seed_users, seed_lookups):
    task = task_service.create_task(
        db, _create_payload(seed_lookups, [stage_pdf(store, "plan.pdf", b"%PDF-v1")]), seed_users["admin"], store
    )

    task_service.update_task(
        db,
        task.task_id,
        _update_payload(task, staged=[stage_pdf(store, "plan.pdf", b"%PDF-v2")]),
        seed_users["admin"],
        store,
    )

    files = task_service.get_task_files(db, task.task_id)
    assert len(files) == 1
    assert db.query(StoredFile).count() == 1
    assert _read(files[0].file_path) == b"%PDF-v2"
    assert os.listdir(store.task_directory(task.task_id)) == ["plan.pdf"]


def test_update_failure_restores_overwritten_binary_and_rows(db, store, seed_users, seed_lookups, monkeypatch):
    task = task_service.create_task(
        db, _create_payload(seed_lookups, [stage_pdf(store, "plan.pdf", b"%PDF-v1")]), seed_users["admin"], store
    )
    existing = task_service.get_task_files(db, task.task_id)[0]
    existing_path = existing.file_path
    existing_id = existing.file_id
    staged = stage_pdf(store, "plan.pdf", b"%PDF-v2")
    _fail_linking(monkeypatch)

    with pytest.raises(TransactionFailure):
        task_service.update_task(
            db,
            task.task_id,
            _update_payload(task, staged=[staged], removed=[existing_id], subject="Changed"),
            seed_users["admin"],
            store,
        )

    db.expire_all()
    assert task_service.get_task(db, task.task_id).subject == "Audit"
    assert [f.file_id for f in task_service.get_task_files(db, task.task_id)] == [existing_id]
    assert _read(existing_path) == b"%PDF-v1"
    assert _read(staged.temp_file_path) == b"%PDF-v2"
    assert os.listdir(store.task_directory(task.task_id)) == ["plan.pdf"]


def test_update_skips_unknown_removed_ids(db, store, seed_users, seed_lookups):
    task = task_service.create_task(
        db, _create_payload(seed_lookups, [stage_pdf(store, "keep.pdf")]), seed_users["admin"], store
    )

    task_service.update_task(db, task.task_id, _update_payload(task, removed=[12345]), seed_users["admin"], store)

    assert [f.filename for f in task_service.get_task_files(db, task.task_id)] == ["keep.pdf"]


def test_update_does_not_remove_files_of_other_tasks(db, store, seed_users, seed_lookups):
    first = task_service.create_task(
        db, _create_payload(seed_lookups, [stage_pdf(store, "one.pdf")]), seed_users["admin"], store
    )
    second = task_service.create_task(db, _create_payload(seed_lookups), seed_users["admin"], store)
    foreign_id = task_service.get_task_files(db, first.task_id)[0].file_id

    task_service.update_task(db, second.task_id, _update_payload(second, removed=[foreign_id]), seed_users["admin"], store)

    assert [f.file_id for f in task_service.get_task_files(db, first.task_id)] == [foreign_id]


def test_update_other_department_forbidden(db, store, seed_users, seed_task):
    with pytest.raises(PermissionDenied):
        task_service.update_task(db, seed_task.task_id, _update_payload(seed_task), seed_users["hr_user"], store)


def test_delete_removes_rows_binaries_and_directory(db, store, seed_users, seed_lookups):
    task = task_service.create_task(
        db,
        _create_payload(seed_lookups, [stage_pdf(store, "a.pdf"), stage_pdf(store, "b.pdf")]),
        seed_users["admin"],
        store,
    )
    task_id = task.task_id
    paths = [f.file_path for f in task_service.get_task_files(db, task_id)]

    task_service.delete_task(db, task_id, seed_users["admin"], store)

    assert db.query(Task).filter(Task.task_id == task_id).count() == 0
    assert db.query(TaskFile).filter(TaskFile.task_id == task_id).count() == 0
    assert db.query(StoredFile).count() == 0
    assert all(not os.path.exists(p) for p in paths)
    assert not os.path.exists(store.task_directory(task_id))


def test_delete_task_without_files(db, store, seed_users, seed_task):
    task_service.delete_task(db, seed_task.task_id, seed_users["it_user"], store)
    assert db.query(Task).count() == 0


def test_delete_missing_task_is_not_found(db, store, seed_users):
    with pytest.raises(NotFound):
        task_service.delete_task(db, 404, seed_users["admin"], store)


def test_delete_failure_keeps_rows_and_binaries(db, store, seed_users, seed_lookups, monkeypatch):
    task = task_service.create_task(
        db,
        _create_payload(seed_lookups, [stage_pdf(store, "a.pdf"), stage_pdf(store, "b.pdf")]),
        seed_users["admin"],
        store,
    )
    task_id = task.task_id
    paths = [f.file_path for f in task_service.get_task_files(db, task_id)]

    def boom(*args, **kwargs):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(task_repository, "delete_task", boom)

    with pytest.raises(TransactionFailure) as excinfo:
        task_service.delete_task(db, task_id, seed_users["admin"], store)
    assert isinstance(excinfo.value.__cause__, SQLAlchemyError)

    assert db.query(Task).filter(Task.task_id == task_id).count() == 1
    assert db.query(TaskFile).filter(TaskFile.task_id == task_id).count() == 2
    assert db.query(StoredFile).count() == 2
    assert all(_read(p) == PDF_BYTES for p in paths)
    assert sorted(os.listdir(store.task_directory(task_id))) == ["a.pdf", "b.pdf"]
