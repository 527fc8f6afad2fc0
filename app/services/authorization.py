from collections.abc import Iterable

from sqlalchemy.orm import Session

from app.core.errors import BadRequest, Forbidden
from app.models.user import User, UserCourseRole, UserRole


class AuthorizationService:
    """Course-role and superuser checks shared by every route."""

    def __init__(self, db: Session):
        self.db = db

    def role_in_course(self, user_id: int, course_id: int) -> str | None:
        row = (
            self.db.query(UserRole.name)
            .join(UserCourseRole, UserCourseRole.role_id == UserRole.id)
            .filter(UserCourseRole.user_id == user_id, UserCourseRole.course_id == course_id)
            .first()
        )
        return row[0] if row else None

    def is_superuser(self, user_id: int) -> bool:
        user = self.db.get(User, user_id)
        return bool(user and user.superuser)

    def require_role(
        self, user_id: int, course_id: int | None, allowed_roles: Iterable[str]
    ) -> str:
        if course_id is None:
            raise BadRequest("Course ID is required.")

        role = self.role_in_course(user_id, course_id)
        if role is None or role not in set(allowed_roles):
            raise Forbidden("Access denied. Insufficient role.")
        return role

    def require_superuser(self, user_id: int) -> None:
        if not self.is_superuser(user_id):
            raise Forbidden("Access denied. Superuser privileges required.")
