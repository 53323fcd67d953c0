import uuid

from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, ForeignKey, func
from sqlalchemy.orm import relationship
from database.db import Base
from models.users import User  # noqa: F401  relationship("User") 등록용


class Course(Base):
    __tablename__ = "courses"  # 과목(강좌) 정보 테이블

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))  # 과목 고유 ID (UUID)
    code = Column(String(50), nullable=False, unique=True)        # 과목 코드 (예: MATH-101)
    name = Column(String(200), nullable=False)                    # 과목 이름
    description = Column(Text)                                    # 과목 설명
    credits = Column(Integer, nullable=False, default=1)          # 학점
    grade_level = Column(String(20), nullable=False)              # 대상 학년
    teacher_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))  # 담당 교사
    max_students = Column(Integer, default=30)                    # 정원
    is_active = Column(Boolean, nullable=False, default=True)     # 개설 여부
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # ✅ 담당 교사 (N:1, 없을 수 있음)
    teacher = relationship("User", lazy="joined")
