import uuid

from sqlalchemy import Column, String, Date, DateTime, Text, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database.db import Base
from models.students import Student  # noqa: F401  relationship 대상 등록용


class Attendance(Base):
    __tablename__ = "attendance"  # 출결 기록 테이블
    __table_args__ = (
        # 학생 × 과목 × 날짜 당 출결은 하나 (upsert 충돌 키)
        UniqueConstraint("student_id", "course_id", "date", name="uq_attendance_student_course_date"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)                           # 날짜
    status = Column(String(20), nullable=False)                   # PRESENT, ABSENT, LATE, EXCUSED
    notes = Column(Text)                                          # 비고 (사유 등)
    marked_by = Column(String(36), ForeignKey("users.id"), nullable=False)  # 기록한 사용자
    marked_at = Column(DateTime, server_default=func.now())

    student = relationship("Student", lazy="joined")
