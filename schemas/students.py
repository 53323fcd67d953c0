from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.enums import GradeLevel
from schemas.users import UserOut


# ✅ 학생 등록용 (POST 요청)
class StudentCreate(BaseModel):
    user_id: str                             # 로그인 계정 ID (users.id)
    student_id: str                          # 학번
    grade_level: GradeLevel                  # 학년
    date_of_birth: Optional[date] = None
    guardian_name: Optional[str] = None
    guardian_email: Optional[str] = None
    guardian_phone: Optional[str] = None
    address: Optional[str] = None
    enrollment_date: Optional[date] = None
    status: str = "ACTIVE"


# ✅ 학생 수정용 (PATCH 요청, 부분 수정)
class StudentUpdate(BaseModel):
    student_id: Optional[str] = None
    grade_level: Optional[GradeLevel] = None
    date_of_birth: Optional[date] = None
    guardian_name: Optional[str] = None
    guardian_email: Optional[str] = None
    guardian_phone: Optional[str] = None
    address: Optional[str] = None
    status: Optional[str] = None


class StudentOut(BaseModel):
    id: str
    user_id: str
    student_id: str
    grade_level: GradeLevel
    date_of_birth: Optional[date] = None
    guardian_name: Optional[str] = None
    guardian_email: Optional[str] = None
    guardian_phone: Optional[str] = None
    address: Optional[str] = None
    enrollment_date: Optional[date] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ✅ 학생 + 사용자 조인 결과
class StudentWithUser(StudentOut):
    user: UserOut
