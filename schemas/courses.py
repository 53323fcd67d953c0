from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.enums import GradeLevel
from schemas.users import UserOut


class CourseCreate(BaseModel):
    code: str                                # 과목 코드
    name: str                                # 과목 이름
    description: Optional[str] = None
    credits: int = Field(1, ge=1)            # 학점
    grade_level: GradeLevel                  # 대상 학년
    teacher_id: Optional[str] = None         # 담당 교사 (users.id)
    max_students: Optional[int] = Field(30, ge=1)
    is_active: bool = True


class CourseUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    credits: Optional[int] = Field(None, ge=1)
    grade_level: Optional[GradeLevel] = None
    teacher_id: Optional[str] = None
    max_students: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None


class CourseOut(BaseModel):
    id: str
    code: str
    name: str
    description: Optional[str] = None
    credits: int
    grade_level: GradeLevel
    teacher_id: Optional[str] = None
    max_students: Optional[int] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ✅ 과목 + 담당 교사 조인 결과 (교사 미지정 가능)
class CourseWithTeacher(CourseOut):
    teacher: Optional[UserOut] = None
