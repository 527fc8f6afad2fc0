from sqlalchemy.orm import Session

from app.core.errors import InternalError
from app.models.section import Status
from app.models.user import UserRole


def status_id(db: Session, name: str) -> int:
    status = db.query(Status).filter(Status.name == name).first()
    if status is None:
        raise InternalError(f"{name} status not found. Please ensure statuses are seeded.")
    return status.id


def role_id(db: Session, name: str) -> int:
    role = db.query(UserRole).filter(UserRole.name == name).first()
    if role is None:
        raise InternalError(f"{name} role not found. Please ensure roles are seeded.")
    return role.id
