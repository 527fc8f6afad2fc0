from datetime import datetime, timedelta, timezone
from typing import Protocol

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.errors import Unauthorized

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


class TokenRevocationStore(Protocol):
    def is_revoked(self, token: str) -> bool: ...

    def revoke(self, token: str) -> None: ...


class InMemoryRevocationStore:
    """Tokens logged out during the lifetime of this process."""

    def __init__(self) -> None:
        self._tokens: set[str] = set()

    def is_revoked(self, token: str) -> bool:
        return token in self._tokens

    def revoke(self, token: str) -> None:
        self._tokens.add(token)


class TokenService:
    def __init__(self, secret_key: str, algorithm: str, expires_delta: timedelta):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expires_delta = expires_delta

    def create_access_token(self, user_id: int, expires_delta: timedelta | None = None) -> str:
        expire = datetime.now(timezone.utc) + (expires_delta or self._expires_delta)
        to_encode = {"sub": str(user_id), "exp": expire}
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def decode(self, token: str) -> int:
        """Return the user id carried by ``token``."""
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError:
            raise Unauthorized("Invalid or expired token.")

        sub = payload.get("sub")
        try:
            return int(sub)
        except (TypeError, ValueError):
            raise Unauthorized("Invalid or expired token.")
