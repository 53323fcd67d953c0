from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from schemas.assessments import AssessmentOut
from schemas.students import StudentWithUser


# ✅ 성적 등록용 (POST, 학생×평가 기준 upsert)
#    - 음수 점수 검사는 코어(grade_aggregator)에서 ValidationError로 처리
class GradeCreate(BaseModel):
    student_id: str                          # students.id
    assessment_id: str                       # assessments.id
    score: Decimal                           # 점수
    letter_grade: Optional[str] = None       # 등급 수동 지정 (없으면 자동 계산)
    feedback: Optional[str] = None
    graded_by: Optional[str] = None          # 라우터에서 현재 사용자로 채움


# ✅ 성적 수정용 (PATCH, 부분 수정)
class GradeUpdate(BaseModel):
    score: Optional[Decimal] = None
    letter_grade: Optional[str] = None
    feedback: Optional[str] = None


class GradeOut(BaseModel):
    id: str
    student_id: str
    assessment_id: str
    score: float
    letter_grade: Optional[str] = None
    feedback: Optional[str] = None
    graded_by: str
    graded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ✅ 성적 + 학생(사용자 포함) + 평가 조인 결과
class GradeWithStudentAndAssessment(GradeOut):
    student: StudentWithUser
    assessment: AssessmentOut


# ✅ 성적부(gradebook) 한 줄: 학생별 과목 백분율 + 등급
class StudentCourseGrade(BaseModel):
    student_id: str
    percentage: float                        # 소수 첫째 자리 반올림
    letter_grade: str


class CourseGradebook(BaseModel):
    course_id: Optional[str] = None
    assessment_count: int
    students: List[StudentCourseGrade]
    class_average: float                     # 학생 백분율 평균 (소수 첫째 자리)
