from datetime import datetime

from pydantic import BaseModel, model_validator

from app.schemas.file import FileRead


class ClassSessionCreate(BaseModel):
    topic: str
    starting_date_time: datetime
    ending_date_time: datetime
    visible: bool = True

    @model_validator(mode="after")
    def check_times(self):
        if self.ending_date_time < self.starting_date_time:
            raise ValueError("ending_date_time must not be before starting_date_time")
        return self


class ClassSessionRead(BaseModel):
    id: int
    course_id: int
    topic: str
    starting_date_time: datetime
    ending_date_time: datetime
    visible: bool

    class Config:
        from_attributes = True


class ClassSessionCreated(BaseModel):
    class_session: ClassSessionRead
    assessments_created: int
    presence_records_created: int


class MyRaport(BaseModel):
    id: int
    description: str | None = None
    class_session_id: int
    section_id: int
    created_at: datetime
    updated_at: datetime
    files: list[FileRead] = []

    class Config:
        from_attributes = True


class ClassSessionWithRaport(ClassSessionRead):
    raport: MyRaport | None = None
