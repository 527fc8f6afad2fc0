from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.deps import get_db, get_revocation_store, get_token_service
from app.core.errors import Unauthorized
from app.core.security import TokenRevocationStore, TokenService
from app.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


def get_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    jwt: str | None = Query(default=None, include_in_schema=False),
) -> str:
    """Bearer header first, ``?jwt=`` query parameter as fallback."""
    if credentials and credentials.credentials:
        return credentials.credentials
    if jwt:
        return jwt
    raise Unauthorized("No token provided.")


def get_current_user(
    token: str = Depends(get_token),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    revoked: TokenRevocationStore = Depends(get_revocation_store),
) -> User:
    if revoked.is_revoked(token):
        raise Unauthorized("Invalid or expired token.")

    user_id = tokens.decode(token)
    user = db.get(User, user_id)
    if user is None:
        raise Unauthorized("Invalid or expired token.")
    return user
