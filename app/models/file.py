from sqlalchemy import Column, DateTime, Integer, String, func

from app.db.base_class import Base


class File(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)  # original upload name
    url = Column(String(512), nullable=False)
    type = Column(String(255), nullable=False)  # MIME type
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
