from pydantic import BaseModel

from app.schemas.raport import SectionWithRaports
from app.schemas.user import UserBrief


class AssessmentRead(BaseModel):
    id: int
    user_id: int
    class_session_id: int
    grade: float | None = None
    feedback: str | None = None

    class Config:
        from_attributes = True


class AssessmentWithUser(AssessmentRead):
    user: UserBrief


class AssessmentUpsert(BaseModel):
    user_id: int
    grade: float
    feedback: str | None = None


class AssessmentsAndRaports(BaseModel):
    assessments: list[AssessmentWithUser]
    sections: list[SectionWithRaports]


class PresenceRead(BaseModel):
    id: int
    user_id: int
    class_session_id: int
    present: bool
    user: UserBrief

    class Config:
        from_attributes = True


class PresenceUpsert(BaseModel):
    user_id: int
    present: bool
