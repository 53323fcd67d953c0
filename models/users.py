import uuid

from sqlalchemy import Column, String, DateTime, func
from database.db import Base


class User(Base):
    __tablename__ = "users"  # 로그인 사용자 (관리자/교사/학생 공통)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))  # 사용자 고유 ID (UUID)
    email = Column(String(255), unique=True)                    # 이메일
    first_name = Column(String(100))                            # 이름
    last_name = Column(String(100))                             # 성
    profile_image_url = Column(String(500))                     # 프로필 이미지 URL
    role = Column(String(20), nullable=False, default="STUDENT")  # 역할 (ADMIN, TEACHER, STUDENT)
    api_token = Column(String(128), unique=True, index=True)    # Bearer 인증 토큰
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
