from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from schemas.courses import CourseOut
from schemas.students import StudentWithUser


class EnrollmentCreate(BaseModel):
    student_id: str                          # students.id
    course_id: str                           # courses.id
    status: str = "ACTIVE"


class EnrollmentOut(BaseModel):
    id: str
    student_id: str
    course_id: str
    enrolled_at: Optional[datetime] = None
    status: str

    model_config = ConfigDict(from_attributes=True)


# ✅ 수강 + 학생(사용자 포함) + 과목 조인 결과
class EnrollmentWithStudentAndCourse(EnrollmentOut):
    student: StudentWithUser
    course: CourseOut
