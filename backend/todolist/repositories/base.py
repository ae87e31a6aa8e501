"""Shared helpers for repository writes."""

from sqlalchemy.orm import Session

from todolist.database import in_transactional_unit


def persist(db: Session) -> None:
    # Inside a transactional unit the caller owns the commit.
    if in_transactional_unit(db):
        db.flush()
    else:
        db.commit()
