from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from app.core.config import STAFF_ROLES
from app.core.deps import get_db
from app.core.errors import NotFound
from app.core.permissions import CourseAccess, require_course_role
from app.models.class_session import Presence
from app.models.user import User, UserCourseRole
from app.routers.assessments import _ensure_session_in_course
from app.schemas.assessment import PresenceRead, PresenceUpsert

router = APIRouter()


@router.get(
    "/{course_id}/class_sessions/{class_session_id}/presence",
    response_model=list[PresenceRead],
)
def list_presence(
    course_id: int,
    class_session_id: int,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*STAFF_ROLES)),
):
    _ensure_session_in_course(db, course_id, class_session_id)

    return (
        db.query(Presence)
        .join(User, User.id == Presence.user_id)
        .options(joinedload(Presence.user))
        .filter(Presence.class_session_id == class_session_id)
        .order_by(User.last_name.asc(), User.first_name.asc())
        .all()
    )


@router.put(
    "/{course_id}/class_sessions/{class_session_id}/presence",
    response_model=PresenceRead,
)
def mark_presence(
    course_id: int,
    class_session_id: int,
    payload: PresenceUpsert,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*STAFF_ROLES)),
):
    _ensure_session_in_course(db, course_id, class_session_id)

    enrolled = (
        db.query(UserCourseRole)
        .filter(UserCourseRole.course_id == course_id, UserCourseRole.user_id == payload.user_id)
        .first()
    )
    if not enrolled:
        raise NotFound("User not found in this course.")

    # at most one row per (user, class session)
    record = (
        db.query(Presence)
        .filter(
            Presence.class_session_id == class_session_id,
            Presence.user_id == payload.user_id,
        )
        .first()
    )
    if record is None:
        record = Presence(class_session_id=class_session_id, user_id=payload.user_id)
        db.add(record)
    record.present = payload.present

    db.commit()
    db.refresh(record)
    return record
