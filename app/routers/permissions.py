import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import ROLE_HEADTEACHER, ROLES
from app.core.deps import get_db
from app.core.errors import BadRequest, NotFound
from app.core.permissions import CourseAccess, require_course_role
from app.models.user import User, UserCourseRole, UserRole
from app.schemas.auth import Message
from app.schemas.course import CourseMember, RoleUpdate
from app.services.lookups import role_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{course_id}/users", response_model=list[CourseMember])
def list_course_users(
    course_id: int,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*ROLES)),
):
    rows = (
        db.query(User, UserRole.name)
        .join(UserCourseRole, UserCourseRole.user_id == User.id)
        .join(UserRole, UserRole.id == UserCourseRole.role_id)
        .filter(UserCourseRole.course_id == course_id)
        .order_by(User.last_name.asc(), User.first_name.asc())
        .all()
    )
    return [
        {
            "user_id": u.id,
            "username": u.username,
            "first_name": u.first_name,
            "last_name": u.last_name,
            "email": u.email,
            "role": role,
        }
        for u, role in rows
    ]


def _membership(db: Session, course_id: int, user_id: int) -> UserCourseRole:
    membership = (
        db.query(UserCourseRole)
        .filter(UserCourseRole.user_id == user_id, UserCourseRole.course_id == course_id)
        .first()
    )
    if not membership:
        raise NotFound("User not found in this course.")
    return membership


@router.put("/{course_id}/users/{user_id}/role", response_model=Message)
def change_user_role(
    course_id: int,
    user_id: int,
    payload: RoleUpdate,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(ROLE_HEADTEACHER)),
):
    if payload.new_role not in ROLES:
        raise BadRequest("Invalid role name.")

    membership = _membership(db, course_id, user_id)
    membership.role_id = role_id(db, payload.new_role)
    db.commit()

    logger.info(
        "User %s set role of user %s in course %s to %s",
        access.user.id,
        user_id,
        course_id,
        payload.new_role,
    )
    return {"message": "User role updated successfully."}


@router.delete("/{course_id}/users/{user_id}", response_model=Message)
def remove_user_from_course(
    course_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(ROLE_HEADTEACHER)),
):
    membership = _membership(db, course_id, user_id)
    db.delete(membership)
    db.commit()
    return {"message": "User removed from course successfully."}
