import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.config import ROLE_STUDENT, ROLES, STAFF_ROLES
from app.core.deps import get_db, get_file_storage
from app.core.errors import InternalError, NotFound
from app.core.permissions import CourseAccess, require_course_role
from app.models.class_session import ClassSession
from app.models.raport import Raport
from app.models.section import UserSection
from app.schemas.auth import Message
from app.schemas.class_session import (
    ClassSessionCreate,
    ClassSessionCreated,
    ClassSessionWithRaport,
)
from app.schemas.raport import RaportSubmit, RaportSubmitted
from app.services.files import FileStorage
from app.services.raports import delete_class_session, submit_raport
from app.services.roster import add_session_records, student_ids_in_course

logger = logging.getLogger(__name__)

router = APIRouter()


def get_course_session(db: Session, course_id: int, class_session_id: int) -> ClassSession:
    class_session = db.query(ClassSession).filter(ClassSession.id == class_session_id).first()
    if not class_session or class_session.course_id != course_id:
        raise NotFound("Class session not found.")
    return class_session


@router.post(
    "/{course_id}/class_sessions",
    response_model=ClassSessionCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_class_session(
    course_id: int,
    payload: ClassSessionCreate,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*STAFF_ROLES)),
):
    try:
        class_session = ClassSession(
            course_id=course_id,
            topic=payload.topic,
            starting_date_time=payload.starting_date_time,
            ending_date_time=payload.ending_date_time,
            visible=payload.visible,
        )
        db.add(class_session)
        db.flush()

        # one empty assessment and one presence row per enrolled student
        created = add_session_records(db, class_session.id, student_ids_in_course(db, course_id))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating class session in course %s", course_id)
        raise InternalError("Failed to create class session and assessments.")

    db.refresh(class_session)
    return {
        "class_session": class_session,
        "assessments_created": created,
        "presence_records_created": created,
    }


@router.get("/{course_id}/class_sessions", response_model=list[ClassSessionWithRaport])
def list_class_sessions(
    course_id: int,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*ROLES)),
):
    query = db.query(ClassSession).filter(ClassSession.course_id == course_id)
    if access.role == ROLE_STUDENT:
        query = query.filter(ClassSession.visible.is_(True))
    sessions = query.order_by(ClassSession.starting_date_time.asc()).all()

    # raports the caller co-authors, keyed by class session
    my_raports = (
        db.query(Raport)
        .join(UserSection, UserSection.section_id == Raport.section_id)
        .filter(
            UserSection.user_id == access.user.id,
            Raport.class_session_id.in_([s.id for s in sessions]),
        )
        .options(selectinload(Raport.files))
        .order_by(Raport.id)
        .all()
    )
    by_session: dict[int, Raport] = {}
    for raport in my_raports:
        by_session.setdefault(raport.class_session_id, raport)

    result: list[dict] = []
    for s in sessions:
        result.append(
            {
                "id": s.id,
                "course_id": s.course_id,
                "topic": s.topic,
                "starting_date_time": s.starting_date_time,
                "ending_date_time": s.ending_date_time,
                "visible": s.visible,
                "raport": by_session.get(s.id),
            }
        )
    return result


@router.delete("/{course_id}/class_sessions/{class_session_id}", response_model=Message)
def remove_class_session(
    course_id: int,
    class_session_id: int,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    access: CourseAccess = Depends(require_course_role(*STAFF_ROLES)),
):
    class_session = get_course_session(db, course_id, class_session_id)
    delete_class_session(db, storage, class_session)
    return {"message": "Class session deleted successfully."}


@router.post(
    "/{course_id}/class_sessions/{class_session_id}/submit_raport",
    response_model=RaportSubmitted,
    status_code=status.HTTP_201_CREATED,
)
def submit_class_session_raport(
    course_id: int,
    class_session_id: int,
    payload: RaportSubmit,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*ROLES)),
):
    get_course_session(db, course_id, class_session_id)

    submitted = submit_raport(
        db,
        class_session_id=class_session_id,
        submitter=access.user,
        description=payload.description,
        user_ids=payload.user_ids,
        file_ids=payload.file_ids,
    )
    section = submitted.section
    return {
        "message": "Raport submitted successfully, section created, and notifications sent.",
        "raport": submitted.raport,
        "section": {
            "id": section.id,
            "name": section.name,
            "status": section.status.name,
            "users": section.users,
        },
        "notifications_sent": submitted.notifications_sent,
    }
