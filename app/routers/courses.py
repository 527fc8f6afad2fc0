import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.config import (
    NOTIFICATION_COURSE_REQUEST_APPROVED,
    NOTIFICATION_COURSE_REQUEST_REJECTED,
    ROLE_HEADTEACHER,
    ROLE_STUDENT,
    STATUS_ACTIVE,
)
from app.core.current_user import get_current_user
from app.core.deps import get_db
from app.core.errors import Conflict, InternalError, NotFound, Unauthorized
from app.core.permissions import require_superuser
from app.core.security import hash_password, verify_password
from app.models.course import Course, CourseCreationRequest
from app.models.notification import Notification
from app.models.user import User, UserCourseRole, UserRole
from app.schemas.auth import Message
from app.schemas.course import (
    CourseRead,
    CourseRequestApprove,
    CourseRequestCreate,
    CourseRequestRead,
    EnrollRequest,
    MyCourseRead,
)
from app.services.lookups import role_id, status_id
from app.services.roster import add_student_records

logger = logging.getLogger(__name__)

router = APIRouter()


def course_out(course: Course) -> dict:
    return {
        "id": course.id,
        "title": course.title,
        "description": course.description,
        "status": course.status.name,
    }


@router.get("/", response_model=list[CourseRead])
def list_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    courses = db.query(Course).options(joinedload(Course.status)).order_by(Course.id).all()
    return [course_out(c) for c in courses]


@router.get("/me", response_model=list[MyCourseRead])
def my_courses(
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    rows = (
        db.query(Course, UserRole.name)
        .join(UserCourseRole, UserCourseRole.course_id == Course.id)
        .join(UserRole, UserRole.id == UserCourseRole.role_id)
        .filter(UserCourseRole.user_id == me.id)
        .order_by(Course.id)
        .all()
    )
    return [{**course_out(course), "role": role} for course, role in rows]


@router.post(
    "/{course_id}/enroll",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"description": "Incorrect course password"},
        409: {"description": "Already enrolled"},
    },
)
def enroll(
    course_id: int,
    payload: EnrollRequest,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFound("Course not found.")

    if not verify_password(payload.password, course.hashed_password):
        raise Unauthorized("Incorrect course password.")

    existing = (
        db.query(UserCourseRole)
        .filter(UserCourseRole.user_id == me.id, UserCourseRole.course_id == course_id)
        .first()
    )
    if existing:
        raise Conflict("User is already enrolled in this course.")

    db.add(UserCourseRole(user_id=me.id, course_id=course_id, role_id=role_id(db, ROLE_STUDENT)))
    sessions = add_student_records(db, course_id, me.id)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("User is already enrolled in this course.")

    logger.info("User %s enrolled in course %s (%d session records)", me.id, course_id, sessions)
    return {"message": "Successfully enrolled in the course as a student."}


@router.post(
    "/requests",
    response_model=CourseRequestRead,
    status_code=status.HTTP_201_CREATED,
)
def request_course(
    payload: CourseRequestCreate,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    request = CourseCreationRequest(
        course_title=payload.course_title,
        course_description=payload.course_description,
        requested_by=me.id,
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    return request


@router.get("/requests", response_model=list[CourseRequestRead])
def list_course_requests(
    db: Session = Depends(get_db),
    admin: User = Depends(require_superuser),
):
    return db.query(CourseCreationRequest).order_by(CourseCreationRequest.created_at.asc()).all()


def _get_request(db: Session, request_id: int) -> CourseCreationRequest:
    request = db.query(CourseCreationRequest).filter(CourseCreationRequest.id == request_id).first()
    if not request:
        raise NotFound("Course creation request not found.")
    return request


@router.post(
    "/requests/{request_id}/approve",
    response_model=CourseRead,
    status_code=status.HTTP_201_CREATED,
)
def approve_course_request(
    request_id: int,
    payload: CourseRequestApprove,
    db: Session = Depends(get_db),
    admin: User = Depends(require_superuser),
):
    request = _get_request(db, request_id)

    try:
        course = Course(
            title=request.course_title,
            description=request.course_description,
            hashed_password=hash_password(payload.password) if payload.password else None,
            status_id=status_id(db, STATUS_ACTIVE),
        )
        db.add(course)
        db.flush()

        db.add(
            UserCourseRole(
                user_id=request.requested_by,
                course_id=course.id,
                role_id=role_id(db, ROLE_HEADTEACHER),
            )
        )
        db.add(
            Notification(
                user_id=request.requested_by,
                type=NOTIFICATION_COURSE_REQUEST_APPROVED,
                message=f"Your course '{course.title}' has been created.",
            )
        )
        db.delete(request)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error approving course request %s", request_id)
        raise InternalError("Failed to approve course request.")

    db.refresh(course)
    logger.info("Course request %s approved as course %s by %s", request_id, course.id, admin.id)
    return course_out(course)


@router.delete("/requests/{request_id}", response_model=Message)
def reject_course_request(
    request_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_superuser),
):
    request = _get_request(db, request_id)

    db.add(
        Notification(
            user_id=request.requested_by,
            type=NOTIFICATION_COURSE_REQUEST_REJECTED,
            message=f"Your request for course '{request.course_title}' was rejected.",
        )
    )
    db.delete(request)
    db.commit()
    return {"message": "Course creation request rejected."}
