import logging

from sqlalchemy.orm import Session

from app.core.config import ROLES, STATUSES
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.user import UserRole
from app.models.section import Status

logger = logging.getLogger(__name__)


def seed_lookup_tables(db: Session) -> None:
    """Insert the fixed role and status names if they are missing."""
    existing_roles = {name for (name,) in db.query(UserRole.name).all()}
    for name in ROLES:
        if name not in existing_roles:
            db.add(UserRole(name=name))

    existing_statuses = {name for (name,) in db.query(Status.name).all()}
    for name in STATUSES:
        if name not in existing_statuses:
            db.add(Status(name=name))

    db.commit()


def init_db() -> None:
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        seed_lookup_tables(db)
    finally:
        db.close()
    logger.info("Database ready: roles and statuses seeded")
