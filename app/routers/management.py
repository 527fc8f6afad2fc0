from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import ROLE_HEADTEACHER
from app.core.deps import get_db
from app.core.errors import BadRequest, NotFound
from app.core.permissions import CourseAccess, require_course_role
from app.core.security import hash_password
from app.models.course import Course
from app.models.section import Status
from app.routers.courses import course_out
from app.schemas.auth import Message
from app.schemas.course import CourseDetailsUpdate, CoursePasswordUpdate, CourseRead

router = APIRouter()


def _ensure_course_exists(db: Session, course_id: int) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFound("Course not found.")
    return course


@router.put("/{course_id}/details", response_model=CourseRead)
def update_course_details(
    course_id: int,
    payload: CourseDetailsUpdate,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(ROLE_HEADTEACHER)),
):
    course = _ensure_course_exists(db, course_id)

    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise BadRequest("No fields provided for update.")

    if "title" in updates:
        course.title = payload.title
    if "description" in updates:
        course.description = payload.description
    if "status" in updates:
        status = db.query(Status).filter(Status.name == payload.status).first()
        if not status:
            raise BadRequest(f"Unknown status: {payload.status}")
        course.status_id = status.id

    db.commit()
    db.refresh(course)
    return course_out(course)


@router.put("/{course_id}/password", response_model=Message)
def update_course_password(
    course_id: int,
    payload: CoursePasswordUpdate,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(ROLE_HEADTEACHER)),
):
    course = _ensure_course_exists(db, course_id)
    course.hashed_password = hash_password(payload.new_password)
    db.commit()
    return {"message": "Course password updated successfully."}
