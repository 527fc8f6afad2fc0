from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.current_user import get_current_user
from app.core.deps import get_db
from app.core.errors import BadRequest
from app.models.user import User
from app.services.authorization import AuthorizationService


@dataclass
class CourseAccess:
    user: User
    course_id: int
    role: str


def get_authorization_service(db: Session = Depends(get_db)) -> AuthorizationService:
    return AuthorizationService(db)


def _course_id_from(request: Request) -> int | None:
    raw = request.path_params.get("course_id") or request.query_params.get("course_id")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise BadRequest("Course ID must be an integer.")


def require_course_role(*allowed_roles: str):
    """Dependency factory: the caller must hold one of ``allowed_roles`` in the course."""

    def dependency(
        request: Request,
        current_user: User = Depends(get_current_user),
        authz: AuthorizationService = Depends(get_authorization_service),
    ) -> CourseAccess:
        course_id = _course_id_from(request)
        role = authz.require_role(current_user.id, course_id, allowed_roles)
        return CourseAccess(user=current_user, course_id=course_id, role=role)

    return dependency


def require_superuser(
    current_user: User = Depends(get_current_user),
    authz: AuthorizationService = Depends(get_authorization_service),
) -> User:
    authz.require_superuser(current_user.id)
    return current_user
