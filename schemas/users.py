from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.enums import UserRole


# ✅ 사용자 등록/갱신용 (PUT /auth/users)
class UserUpsert(BaseModel):
    id: Optional[str] = None                 # 없으면 새 UUID 발급
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: UserRole = UserRole.STUDENT
    api_token: Optional[str] = None


# ✅ 사용자 응답용 (토큰은 응답에 포함하지 않음)
class UserOut(BaseModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
