import uuid

from sqlalchemy import Column, String, Numeric, DateTime, Text, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database.db import Base
from models.students import Student  # noqa: F401  relationship 대상 등록용
from models.assessments import Assessment  # noqa: F401


class Grade(Base):
    __tablename__ = "grades"  # 평가별 학생 점수
    __table_args__ = (
        # 학생 × 평가 당 성적은 하나 (upsert 충돌 키)
        UniqueConstraint("student_id", "assessment_id", name="uq_grade_student_assessment"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    assessment_id = Column(String(36), ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    score = Column(Numeric(5, 2), nullable=False)                 # 점수 (0 이상, 만점 초과 허용, 0.01 단위)
    letter_grade = Column(String(5))                              # 등급 (수동 지정 시)
    feedback = Column(Text)                                       # 피드백
    graded_by = Column(String(36), ForeignKey("users.id"), nullable=False)  # 채점자
    graded_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    student = relationship("Student", lazy="joined")
    assessment = relationship("Assessment", back_populates="grades", lazy="joined")
