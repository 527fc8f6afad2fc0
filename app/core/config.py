from datetime import timedelta
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./classroom.db"

    # One of these must be set; the file variant reads its first line.
    SECRET_KEY: str | None = None
    SECRET_KEY_FILE: str | None = None
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120

    UPLOAD_DIR: str = "uploads"

    @property
    def access_token_expire(self) -> timedelta:
        return timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES)

    def resolve_secret_key(self) -> str:
        if self.SECRET_KEY:
            return self.SECRET_KEY
        if self.SECRET_KEY_FILE:
            lines = Path(self.SECRET_KEY_FILE).read_text(encoding="utf-8").splitlines()
            if lines and lines[0].strip():
                return lines[0].strip()
        raise RuntimeError("Failed to load SECRET_KEY: set SECRET_KEY or SECRET_KEY_FILE.")


settings = Settings()

# Assessment grade bounds
GRADE_MIN = 0.0
GRADE_MAX = 5.0

# Role and status names seeded on startup
ROLE_HEADTEACHER = "headteacher"
ROLE_TEACHER = "teacher"
ROLE_STUDENT = "student"
ROLES = (ROLE_HEADTEACHER, ROLE_TEACHER, ROLE_STUDENT)
STAFF_ROLES = (ROLE_HEADTEACHER, ROLE_TEACHER)

STATUS_ACTIVE = "Active"
STATUS_PENDING = "Pending"
STATUS_ARCHIVED = "Archived"
STATUSES = (STATUS_ACTIVE, STATUS_PENDING, STATUS_ARCHIVED)

NOTIFICATION_RAPORT_SECTION_ADDITION = "raport_section_addition"
NOTIFICATION_COURSE_REQUEST_APPROVED = "course_request_approved"
NOTIFICATION_COURSE_REQUEST_REJECTED = "course_request_rejected"
