"""Prepare a fresh deployment: database tables plus attachment storage.

Usage: python scripts/init_db.py [--check]

With ``--check`` nothing is created; the script only reports which tables and
storage directories are missing and exits non-zero if any are.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect

from todolist.config import settings
from todolist.database import engine, Base
import todolist.models  # noqa: F401 - registers all models
from todolist.services.attachment_store import store


def missing_parts():
    existing_tables = set(inspect(engine).get_table_names())
    missing = [f"table {name}" for name in Base.metadata.tables if name not in existing_tables]
    for label, path in (("attachment root", store.attachment_root), ("staging dir", store.temp_dir)):
        if not os.path.isdir(path):
            missing.append(f"{label} {path}")
    return missing


def init_db(check_only: bool = False) -> int:
    missing = missing_parts()
    if check_only:
        for part in missing:
            print(f"missing: {part}")
        return 1 if missing else 0

    print(f"Preparing {settings.DATABASE_URL} ...")
    Base.metadata.create_all(bind=engine)
    store.ensure_directories()
    print(f"Attachments: {store.attachment_root}")
    print(f"Staging:     {store.temp_dir}")
    print(f"Created {len(missing)} missing part(s).")
    return 0


if __name__ == "__main__":
    sys.exit(init_db(check_only="--check" in sys.argv[1:]))
