from pydantic import BaseModel, Field

from app.schemas.file import FileRead


class MaterialCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    visible: bool = True
    index: int = 0
    file_ids: list[int] = []


class MaterialUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    visible: bool | None = None
    index: int | None = None
    deleted_file_ids: list[int] = []
    new_file_ids: list[int] = []


class MaterialRead(BaseModel):
    id: int
    course_id: int
    title: str
    description: str | None = None
    visible: bool
    index: int
    files: list[FileRead] = []

    class Config:
        from_attributes = True
