from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.file import FileRead
from app.schemas.user import UserBrief


class RaportSubmit(BaseModel):
    description: str | None = None
    user_ids: list[int] = Field(min_length=1)
    file_ids: list[int] = []


class RaportEdit(BaseModel):
    description: str | None = None
    deleted_file_ids: list[int] = []
    new_file_ids: list[int] = []


class RaportRead(BaseModel):
    id: int
    description: str | None = None
    user_id: int
    class_session_id: int
    section_id: int
    created_at: datetime
    updated_at: datetime
    files: list[FileRead] = []

    class Config:
        from_attributes = True


class SectionRead(BaseModel):
    id: int
    name: str
    status: str
    users: list[UserBrief] = []


class RaportSubmitted(BaseModel):
    message: str
    raport: RaportRead
    section: SectionRead
    notifications_sent: int


class SectionRaport(BaseModel):
    id: int
    description: str | None = None
    user_id: int
    created_at: datetime
    # None while the section is still pending
    files: list[FileRead] | None = None


class SectionWithRaports(SectionRead):
    raports: list[SectionRaport]
