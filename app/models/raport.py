from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Raport(Base):
    __tablename__ = "raports"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    class_session_id = Column(
        Integer, ForeignKey("class_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    section_id = Column(Integer, ForeignKey("sections.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    author = relationship("User")
    class_session = relationship("ClassSession", back_populates="raports")
    section = relationship("Section", back_populates="raports")
    files = relationship("File", secondary="raport_files", viewonly=True, order_by="File.id")


class RaportFile(Base):
    __tablename__ = "raport_files"

    id = Column(Integer, primary_key=True, index=True)
    raport_id = Column(
        Integer, ForeignKey("raports.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_id = Column(Integer, ForeignKey("files.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("raport_id", "file_id", name="uq_raport_files_raport_file"),
    )
