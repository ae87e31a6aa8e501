"""SQLAlchemy engine, session factory and the scoped transactional unit."""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from todolist.config import settings

UNIT_KEY = "transactional_unit"

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def in_transactional_unit(db: Session) -> bool:
    return bool(db.info.get(UNIT_KEY))


@contextmanager
def transactional_unit(db: Session) -> Iterator[Session]:
    """Run a block of repository calls as one commit-or-rollback unit.

    Repository writes made inside the block only flush; the unit commits once
    when the block exits normally and rolls back on any exception, including a
    failing commit. Nested use joins the outermost unit.
    """
    if in_transactional_unit(db):
        yield db
        return

    db.info[UNIT_KEY] = True
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.info.pop(UNIT_KEY, None)
