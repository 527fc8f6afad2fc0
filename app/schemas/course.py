from datetime import datetime

from pydantic import BaseModel, Field


class CourseRead(BaseModel):
    id: int
    title: str
    description: str | None = None
    status: str


class MyCourseRead(CourseRead):
    role: str


class EnrollRequest(BaseModel):
    password: str = Field(min_length=1)


class CourseRequestCreate(BaseModel):
    course_title: str = Field(min_length=1, max_length=255)
    course_description: str | None = None


class CourseRequestRead(BaseModel):
    id: int
    course_title: str
    course_description: str | None = None
    requested_by: int
    created_at: datetime

    class Config:
        from_attributes = True


class CourseRequestApprove(BaseModel):
    password: str | None = None


class CourseDetailsUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: str | None = None


class CoursePasswordUpdate(BaseModel):
    new_password: str = Field(min_length=1)


class CourseMember(BaseModel):
    user_id: int
    username: str
    first_name: str
    last_name: str
    email: str | None = None
    role: str


class RoleUpdate(BaseModel):
    new_role: str
