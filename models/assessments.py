import uuid

from sqlalchemy import Column, String, Numeric, Date, DateTime, Text, ForeignKey, func
from sqlalchemy.orm import relationship
from database.db import Base


class Assessment(Base):
    __tablename__ = "assessments"  # 평가 항목 (퀴즈, 과제, 중간/기말, 프로젝트)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(200), nullable=False)                    # 평가 이름 (예: Midterm)
    type = Column(String(20), nullable=False)                     # QUIZ, ASSIGNMENT, MIDTERM, FINAL, PROJECT
    max_score = Column(Numeric(5, 2), nullable=False)             # 만점
    weight = Column(Numeric(3, 2), nullable=False, default=1)     # 가중치 (기본 1.00)
    due_date = Column(Date)                                       # 마감일
    description = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # ✅ 평가 삭제 시 성적도 함께 삭제
    grades = relationship("Grade", back_populates="assessment", cascade="all, delete-orphan", passive_deletes=True)
