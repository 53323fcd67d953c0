import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database.db import Base
from models.students import Student  # noqa: F401  relationship 대상 등록용
from models.courses import Course  # noqa: F401


class Enrollment(Base):
    __tablename__ = "enrollments"  # 수강 신청 (학생 ↔ 과목)
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    enrolled_at = Column(DateTime, server_default=func.now())     # 수강 등록 시각
    status = Column(String(20), nullable=False, default="ACTIVE")  # 수강 상태

    student = relationship("Student", lazy="joined")
    course = relationship("Course", lazy="joined")
