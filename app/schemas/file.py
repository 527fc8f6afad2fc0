from pydantic import BaseModel


class FileRead(BaseModel):
    id: int
    name: str
    url: str
    type: str

    class Config:
        from_attributes = True
