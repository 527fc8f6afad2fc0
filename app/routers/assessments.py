from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.config import GRADE_MAX, GRADE_MIN, ROLES, STAFF_ROLES, STATUS_PENDING
from app.core.deps import get_db
from app.core.errors import BadRequest, NotFound
from app.core.permissions import CourseAccess, require_course_role
from app.models.class_session import Assessment, ClassSession
from app.models.raport import Raport
from app.models.section import Section
from app.models.user import User, UserCourseRole
from app.schemas.assessment import AssessmentRead, AssessmentsAndRaports, AssessmentUpsert

router = APIRouter()


def _ensure_session_in_course(db: Session, course_id: int, class_session_id: int) -> ClassSession:
    class_session = db.query(ClassSession).filter(ClassSession.id == class_session_id).first()
    if not class_session:
        raise NotFound("Class session not found.")
    if class_session.course_id != course_id:
        raise BadRequest("Class session does not belong to the specified course.")
    return class_session


def _section_out(section: Section, raports: list[Raport]) -> dict:
    pending = section.status.name == STATUS_PENDING
    return {
        "id": section.id,
        "name": section.name,
        "status": section.status.name,
        "users": section.users,
        "raports": [
            {
                "id": r.id,
                "description": r.description,
                "user_id": r.user_id,
                "created_at": r.created_at,
                # files stay hidden until every collaborator has answered
                "files": None if pending else r.files,
            }
            for r in raports
        ],
    }


@router.get(
    "/{course_id}/class_sessions/{class_session_id}/assessments_and_raports",
    response_model=AssessmentsAndRaports,
)
def assessments_and_raports(
    course_id: int,
    class_session_id: int,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*STAFF_ROLES)),
):
    _ensure_session_in_course(db, course_id, class_session_id)

    assessments = (
        db.query(Assessment)
        .join(User, User.id == Assessment.user_id)
        .options(joinedload(Assessment.user))
        .filter(Assessment.class_session_id == class_session_id)
        .order_by(User.last_name.asc(), User.first_name.asc())
        .all()
    )

    raports = (
        db.query(Raport)
        .options(
            selectinload(Raport.files),
            joinedload(Raport.section).joinedload(Section.status),
            joinedload(Raport.section).selectinload(Section.users),
        )
        .filter(Raport.class_session_id == class_session_id)
        .order_by(Raport.section_id.asc(), Raport.id.asc())
        .all()
    )

    grouped: dict[int, list[Raport]] = {}
    sections: dict[int, Section] = {}
    for raport in raports:
        sections.setdefault(raport.section_id, raport.section)
        grouped.setdefault(raport.section_id, []).append(raport)

    return {
        "assessments": assessments,
        "sections": [_section_out(sections[sid], grouped[sid]) for sid in grouped],
    }


@router.put(
    "/{course_id}/class_sessions/{class_session_id}/assessments",
    response_model=AssessmentRead,
)
def upsert_assessment(
    course_id: int,
    class_session_id: int,
    payload: AssessmentUpsert,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*STAFF_ROLES)),
):
    if payload.grade < GRADE_MIN or payload.grade > GRADE_MAX:
        raise BadRequest(f"Grade must be a number between {GRADE_MIN:g} and {GRADE_MAX:g}.")

    _ensure_session_in_course(db, course_id, class_session_id)

    enrolled = (
        db.query(UserCourseRole)
        .filter(UserCourseRole.course_id == course_id, UserCourseRole.user_id == payload.user_id)
        .first()
    )
    if not enrolled:
        raise NotFound("User not found in this course.")

    assessment = (
        db.query(Assessment)
        .filter(
            Assessment.class_session_id == class_session_id,
            Assessment.user_id == payload.user_id,
        )
        .first()
    )
    if assessment is None:
        assessment = Assessment(class_session_id=class_session_id, user_id=payload.user_id)
        db.add(assessment)

    assessment.grade = payload.grade
    assessment.feedback = payload.feedback

    db.commit()
    db.refresh(assessment)
    return assessment


@router.get("/{course_id}/assessments/me", response_model=list[AssessmentRead])
def my_assessments(
    course_id: int,
    db: Session = Depends(get_db),
    access: CourseAccess = Depends(require_course_role(*ROLES)),
):
    return (
        db.query(Assessment)
        .join(ClassSession, ClassSession.id == Assessment.class_session_id)
        .filter(ClassSession.course_id == course_id, Assessment.user_id == access.user.id)
        .order_by(ClassSession.starting_date_time.asc())
        .all()
    )
