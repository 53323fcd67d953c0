from datetime import date, datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict

from schemas.students import StudentWithUser


# ✅ 출결 기록용 (POST, 학생×과목×날짜 기준 upsert)
#    - status는 문자열로 받고 코어(attendance_recorder)에서 검증
class AttendanceMark(BaseModel):
    student_id: str                          # students.id
    course_id: str                           # courses.id
    date: date                               # 출결 날짜
    status: str                              # PRESENT / ABSENT / LATE / EXCUSED
    notes: Optional[str] = None              # 비고
    marked_by: Optional[str] = None          # 라우터에서 현재 사용자로 채움


# ✅ 출결 수정용 (PATCH, 부분 수정)
class AttendanceUpdate(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = None


class AttendanceOut(BaseModel):
    id: str
    student_id: str
    course_id: str
    date: date
    status: str
    notes: Optional[str] = None
    marked_by: str
    marked_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ✅ 출결 + 학생(사용자 포함) 조인 결과
class AttendanceWithStudent(AttendanceOut):
    student: StudentWithUser


# ✅ 특정 과목·날짜 출결 현황 (상태별 인원)
class SessionSummary(BaseModel):
    course_id: str
    date: date
    total: int
    counts: Dict[str, int]


class AttendanceRate(BaseModel):
    student_id: str
    course_id: Optional[str] = None
    window_days: int
    total: int
    attendance_rate: float                   # 소수 첫째 자리
    good_standing: bool                      # ATTENDANCE_REQUIRED 이상 여부
