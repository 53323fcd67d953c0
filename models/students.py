import uuid

from sqlalchemy import Column, String, Date, DateTime, Text, ForeignKey, func
from sqlalchemy.orm import relationship
from database.db import Base
from models.users import User  # noqa: F401  relationship("User") 등록용


class Student(Base):
    __tablename__ = "students"  # 학생 기본 정보 테이블

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))   # 학생 고유 ID (UUID)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)  # 로그인 계정
    student_id = Column(String(50), nullable=False, unique=True)   # 학번
    grade_level = Column(String(20), nullable=False)               # 학년 (GRADE_9 ~ GRADE_12)
    date_of_birth = Column(Date)                                   # 생년월일
    guardian_name = Column(String(100))                            # 보호자 이름
    guardian_email = Column(String(255))                           # 보호자 이메일
    guardian_phone = Column(String(30))                            # 보호자 연락처
    address = Column(Text)                                         # 주소
    enrollment_date = Column(Date, server_default=func.current_date())  # 입학일
    status = Column(String(20), nullable=False, default="ACTIVE")  # 재학 상태
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # ✅ 학생 ↔ 사용자 (N:1)
    user = relationship("User", lazy="joined")
