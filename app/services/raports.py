"""Collaborative raport submission and editing.

A raport is owned by a section: the group of users who wrote it. A solo
submission gets an Active section straight away; with collaborators the
section starts Pending and every other member is sent an invitation
notification. The section becomes Active once all invitations are answered
(see ``app.services.notifications``).
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.config import (
    NOTIFICATION_RAPORT_SECTION_ADDITION,
    STATUS_ACTIVE,
    STATUS_PENDING,
)
from app.core.errors import AppError, BadRequest, Forbidden, InternalError, NotFound
from app.models.class_session import Assessment, ClassSession, Presence
from app.models.notification import Notification
from app.models.raport import Raport, RaportFile
from app.models.section import Section, UserSection
from app.models.user import User, UserCourseRole
from app.services.files import FileStorage, lock_files, release_file, remove_stored
from app.services.lookups import status_id

logger = logging.getLogger(__name__)


@dataclass
class SubmittedRaport:
    raport: Raport
    section: Section
    notifications_sent: int


def _unique(ids: list[int]) -> list[int]:
    return list(dict.fromkeys(ids))


def submit_raport(
    db: Session,
    class_session_id: int,
    submitter: User,
    description: str | None,
    user_ids: list[int],
    file_ids: list[int],
) -> SubmittedRaport:
    class_session = (
        db.query(ClassSession)
        .options(joinedload(ClassSession.course))
        .filter(ClassSession.id == class_session_id)
        .first()
    )
    if class_session is None:
        raise NotFound("Class session not found.")

    user_ids = _unique(user_ids)
    if not user_ids:
        raise BadRequest("At least one user ID is required for the raport.")
    known = {uid for (uid,) in db.query(User.id).filter(User.id.in_(user_ids))}
    unknown = [uid for uid in user_ids if uid not in known]
    if unknown:
        raise BadRequest(f"Unknown user ids: {unknown}")
    if submitter.id not in user_ids:
        raise BadRequest("The submitting user must be one of the raport's users.")

    enrolled = {
        uid
        for (uid,) in db.query(UserCourseRole.user_id).filter(
            UserCourseRole.course_id == class_session.course_id,
            UserCourseRole.user_id.in_(user_ids),
        )
    }
    outsiders = [uid for uid in user_ids if uid not in enrolled]
    if outsiders:
        raise BadRequest(f"Users not enrolled in this course: {outsiders}")

    file_ids = _unique(file_ids)
    solo = len(user_ids) == 1

    try:
        lock_files(db, file_ids)

        section = Section(
            name=f"{class_session.topic} - {submitter.full_name}",
            status_id=status_id(db, STATUS_ACTIVE if solo else STATUS_PENDING),
        )
        db.add(section)
        db.flush()

        db.add_all(UserSection(user_id=uid, section_id=section.id) for uid in user_ids)

        raport = Raport(
            description=description,
            class_session_id=class_session.id,
            section_id=section.id,
            user_id=submitter.id,
        )
        db.add(raport)
        db.flush()

        db.add_all(RaportFile(raport_id=raport.id, file_id=fid) for fid in file_ids)

        message = (
            f"You have been added to a section in course '{class_session.course.title}' "
            f"for the class '{class_session.topic}'."
        )
        invitees = [uid for uid in user_ids if uid != submitter.id]
        db.add_all(
            Notification(
                user_id=uid,
                message=message,
                type=NOTIFICATION_RAPORT_SECTION_ADDITION,
                is_read=False,
                section_id=section.id,
            )
            for uid in invitees
        )

        db.commit()
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error submitting raport for class session %s", class_session_id)
        raise InternalError("Failed to submit raport.")

    db.refresh(raport)
    db.refresh(section)
    logger.info(
        "Raport %s submitted by user %s: section %s (%s), %d invitation(s)",
        raport.id,
        submitter.id,
        section.id,
        "active" if solo else "pending",
        len(invitees),
    )
    return SubmittedRaport(raport=raport, section=section, notifications_sent=len(invitees))


def is_section_member(db: Session, section_id: int, user_id: int) -> bool:
    return (
        db.query(UserSection)
        .filter(UserSection.section_id == section_id, UserSection.user_id == user_id)
        .first()
        is not None
    )


def get_owned_raport(db: Session, raport_id: int, user: User) -> Raport:
    """Load a raport the caller co-authors (is a member of its section)."""
    raport = db.query(Raport).filter(Raport.id == raport_id).first()
    if raport is None:
        raise NotFound("Raport not found.")
    if not is_section_member(db, raport.section_id, user.id):
        raise Forbidden("Access denied. You are not an owner of this raport.")
    return raport


def edit_raport(
    db: Session,
    storage: FileStorage,
    raport: Raport,
    description: str | None = None,
    deleted_file_ids: list[int] | None = None,
    new_file_ids: list[int] | None = None,
) -> Raport:
    new_file_ids = _unique(new_file_ids or [])
    # a file both removed and re-added stays linked
    deleted_file_ids = [fid for fid in _unique(deleted_file_ids or []) if fid not in new_file_ids]
    released: list[str | None] = []

    try:
        if description is not None:
            raport.description = description

        for file_id in deleted_file_ids:
            link = (
                db.query(RaportFile)
                .filter(RaportFile.raport_id == raport.id, RaportFile.file_id == file_id)
                .first()
            )
            if link is None:
                continue
            db.delete(link)
            db.flush()
            released.append(release_file(db, file_id))

        if new_file_ids:
            lock_files(db, new_file_ids)
            linked = {
                fid
                for (fid,) in db.query(RaportFile.file_id).filter(
                    RaportFile.raport_id == raport.id, RaportFile.file_id.in_(new_file_ids)
                )
            }
            db.add_all(
                RaportFile(raport_id=raport.id, file_id=fid)
                for fid in new_file_ids
                if fid not in linked
            )

        db.commit()
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error editing raport %s", raport.id)
        raise InternalError("Failed to edit raport.")

    remove_stored(storage, released)
    db.refresh(raport)
    return raport


def delete_class_session(db: Session, storage: FileStorage, class_session: ClassSession) -> int:
    """Delete a class session with its raports, their sections and per-student rows.

    Returns the number of raports removed.
    """
    released: list[str | None] = []
    raports = db.query(Raport).filter(Raport.class_session_id == class_session.id).all()

    try:
        for raport in raports:
            file_ids = [
                fid
                for (fid,) in db.query(RaportFile.file_id).filter(RaportFile.raport_id == raport.id)
            ]
            db.query(RaportFile).filter(RaportFile.raport_id == raport.id).delete(
                synchronize_session=False
            )
            db.flush()
            for file_id in file_ids:
                released.append(release_file(db, file_id))

            section_id = raport.section_id
            db.delete(raport)
            db.flush()

            db.query(Notification).filter(Notification.section_id == section_id).delete(
                synchronize_session=False
            )
            db.query(UserSection).filter(UserSection.section_id == section_id).delete(
                synchronize_session=False
            )
            db.query(Section).filter(Section.id == section_id).delete(synchronize_session=False)

        db.query(Assessment).filter(Assessment.class_session_id == class_session.id).delete(
            synchronize_session=False
        )
        db.query(Presence).filter(Presence.class_session_id == class_session.id).delete(
            synchronize_session=False
        )
        db.delete(class_session)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error deleting class session %s", class_session.id)
        raise InternalError("Failed to delete class session.")

    remove_stored(storage, released)
    logger.info("Class session %s deleted with %d raport(s)", class_session.id, len(raports))
    return len(raports)
