from sqlalchemy.orm import Session

from app.core.config import ROLE_STUDENT
from app.models.class_session import Assessment, ClassSession, Presence
from app.models.user import UserCourseRole, UserRole


def student_ids_in_course(db: Session, course_id: int) -> list[int]:
    rows = (
        db.query(UserCourseRole.user_id)
        .join(UserRole, UserRole.id == UserCourseRole.role_id)
        .filter(UserCourseRole.course_id == course_id, UserRole.name == ROLE_STUDENT)
        .order_by(UserCourseRole.user_id)
        .all()
    )
    return [user_id for (user_id,) in rows]


def add_session_records(db: Session, class_session_id: int, user_ids: list[int]) -> int:
    """Stage one empty assessment and one absent presence row per student.

    Pairs that already have rows are skipped. Nothing is committed here.
    """
    if not user_ids:
        return 0

    graded = {
        uid
        for (uid,) in db.query(Assessment.user_id).filter(
            Assessment.class_session_id == class_session_id,
            Assessment.user_id.in_(user_ids),
        )
    }
    marked = {
        uid
        for (uid,) in db.query(Presence.user_id).filter(
            Presence.class_session_id == class_session_id,
            Presence.user_id.in_(user_ids),
        )
    }

    db.add_all(
        Assessment(user_id=uid, class_session_id=class_session_id, grade=None)
        for uid in user_ids
        if uid not in graded
    )
    db.add_all(
        Presence(user_id=uid, class_session_id=class_session_id, present=False)
        for uid in user_ids
        if uid not in marked
    )
    return len(user_ids)


def add_student_records(db: Session, course_id: int, user_id: int) -> int:
    """Stage records for a newly enrolled student across every session of the course."""
    session_ids = [
        sid for (sid,) in db.query(ClassSession.id).filter(ClassSession.course_id == course_id)
    ]
    for sid in session_ids:
        add_session_records(db, sid, [user_id])
    return len(session_ids)
