"""Acknowledging notifications.

Plain notifications are single-use: reading one deletes it. Invitations to a
raport section ("raport_section_addition") stay around, marked read, until
every invitation for that section has been answered; the last answer moves
the section from Pending to Active and removes all of its invitations.
Denying an invitation drops the caller from the section but still counts as
an answer.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import NOTIFICATION_RAPORT_SECTION_ADDITION, STATUS_ACTIVE
from app.core.errors import AppError, InternalError, NotFound
from app.models.notification import Notification
from app.models.section import Section, UserSection
from app.models.user import User
from app.services.lookups import status_id

logger = logging.getLogger(__name__)

ACTION_ACCEPT = "accept"
ACTION_DENY = "deny"

OUTCOME_DELETED = "deleted"
OUTCOME_READ = "read"
OUTCOME_ACTIVATED = "activated"


@dataclass
class Resolution:
    outcome: str
    notification_id: int
    section_id: int | None = None
    notification: Notification | None = None


def list_notifications(db: Session, user: User, is_read: bool | None = None) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user.id)
    if is_read is not None:
        query = query.filter(Notification.is_read == is_read)
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def resolve_notification(
    db: Session, notification_id: int, user: User, action: str | None = None
) -> Resolution:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user.id)
        .first()
    )
    if notification is None:
        raise NotFound("Notification not found or permission denied.")

    is_invitation = notification.type == NOTIFICATION_RAPORT_SECTION_ADDITION
    section_id = notification.section_id

    try:
        if is_invitation and action == ACTION_DENY and section_id is not None:
            db.query(UserSection).filter(
                UserSection.user_id == user.id, UserSection.section_id == section_id
            ).delete(synchronize_session=False)
            logger.info("User %s removed from section %s due to denial", user.id, section_id)

        notification.is_read = True
        db.flush()

        if not is_invitation:
            db.delete(notification)
            db.commit()
            return Resolution(outcome=OUTCOME_DELETED, notification_id=notification_id)

        if section_id is not None and _all_answered(db, section_id):
            db.query(Section).filter(Section.id == section_id).update(
                {Section.status_id: status_id(db, STATUS_ACTIVE)}, synchronize_session=False
            )
            db.query(Notification).filter(Notification.section_id == section_id).delete(
                synchronize_session=False
            )
            db.commit()
            logger.info("Section %s activated", section_id)
            return Resolution(
                outcome=OUTCOME_ACTIVATED,
                notification_id=notification_id,
                section_id=section_id,
            )

        db.commit()
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error marking notification %s as read", notification_id)
        raise InternalError("Failed to mark notification as read.")

    db.refresh(notification)
    return Resolution(
        outcome=OUTCOME_READ,
        notification_id=notification_id,
        section_id=section_id,
        notification=notification,
    )


def _all_answered(db: Session, section_id: int) -> bool:
    unread = (
        db.query(Notification.id)
        .filter(Notification.section_id == section_id, Notification.is_read.is_(False))
        .with_for_update()
        .first()
    )
    return unread is None
