from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # hashed enrollment password; courses without one cannot be joined
    hashed_password = Column(String(255), nullable=True)
    status_id = Column(Integer, ForeignKey("statuses.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    status = relationship("Status")
    user_roles = relationship(
        "UserCourseRole", back_populates="course", cascade="all, delete-orphan"
    )
    class_sessions = relationship("ClassSession", back_populates="course")
    materials = relationship("Material", back_populates="course")


class CourseCreationRequest(Base):
    __tablename__ = "course_creation_requests"

    id = Column(Integer, primary_key=True, index=True)
    course_title = Column(String(255), nullable=False)
    course_description = Column(Text, nullable=True)
    requested_by = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    requester = relationship("User")
