from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from config.settings import settings
from dependencies.security import ensure_can_view_student, require_staff, require_user
from dependencies.storage import get_storage
from models.users import User as UserModel
from schemas.enums import AssessmentType, UserRole
from schemas.grades import GradeCreate, GradeUpdate
from services.errors import MissingReferenceError, PermissionDeniedError
from services.grade_aggregator import (
    compute_course_percentage,
    course_gradebook,
    letter_grade_for,
    suggest_letter_grade,
)
from services.storage import DatabaseStorage
from utils.numbers import round_half_up

router = APIRouter(prefix="/grades", tags=["grades"])


# ==========================================================
# [1단계] 조회
# ==========================================================

# ✅ [READ] 성적 조회 (학생/과목/평가 필터). 학생 계정은 본인 성적만
@router.get("/")
def read_grades(
    student_id: Optional[str] = None,
    course_id: Optional[str] = None,
    assessment_id: Optional[str] = None,
    user: UserModel = Depends(require_user),
    storage: DatabaseStorage = Depends(get_storage),
):
    if user.role == UserRole.STUDENT.value:
        if not student_id:
            raise PermissionDeniedError("students must filter grades by their own student_id")
        ensure_can_view_student(user, student_id, storage.db)
    grades = storage.get_grades(student_id, course_id, assessment_id)
    return {"success": True, "data": grades}


# ==========================================================
# [2단계] 집계 (가중 백분율 / 등급)
# ==========================================================

# ✅ [GRADEBOOK] 과목 수강생 전체의 백분율 + 등급 + 반 평균
@router.get("/course/{course_id}/gradebook", dependencies=[Depends(require_staff)])
def get_course_gradebook(course_id: str, storage: DatabaseStorage = Depends(get_storage)):
    if storage.get_course(course_id) is None:
        raise MissingReferenceError("Course", course_id)

    book = course_gradebook(
        assessments=storage.get_assessments(course_id),
        grades=storage.get_grades(course_id=course_id),
        student_ids=storage.enrolled_student_ids(course_id),
        boundaries=settings.GRADE_BOUNDARIES,
        course_id=course_id,
    )
    return {"success": True, "data": book}


# ✅ [STUDENT] 특정 학생의 과목 백분율 + 등급 (평가 유형 필터 가능)
@router.get("/course/{course_id}/student/{student_id}")
def get_student_course_grade(
    course_id: str,
    student_id: str,
    types: Optional[List[AssessmentType]] = Query(None, description="집계할 평가 유형 (예: QUIZ, MIDTERM)"),
    user: UserModel = Depends(require_user),
    storage: DatabaseStorage = Depends(get_storage),
):
    ensure_can_view_student(user, student_id, storage.db)
    if storage.get_course(course_id) is None:
        raise MissingReferenceError("Course", course_id)
    if storage.get_student(student_id) is None:
        raise MissingReferenceError("Student", student_id)

    assessments = storage.get_assessments(course_id)
    grades = storage.get_grades(student_id=student_id, course_id=course_id)
    percentage = compute_course_percentage(assessments, grades, student_id, assessment_types=types)

    return {
        "success": True,
        "data": {
            "course_id": course_id,
            "student_id": student_id,
            "percentage": round_half_up(percentage),
            "letter_grade": letter_grade_for(percentage, settings.GRADE_BOUNDARIES, settings.FALLBACK_GRADE),
            "graded_count": len(grades),
            "assessment_count": len(assessments),
        },
    }


# ==========================================================
# [3단계] 등록 / 수정 / 삭제 (관리자·교사)
# ==========================================================

# ✅ [UPSERT] 성적 입력 (학생×평가 당 1건, 재입력 시 교체)
@router.post("/")
def create_grade(
    data: GradeCreate,
    response: Response,
    user: UserModel = Depends(require_staff),
    storage: DatabaseStorage = Depends(get_storage),
):
    data.graded_by = user.id
    if data.letter_grade is None:
        assessment = storage.get_assessment(data.assessment_id)
        if assessment is not None and data.score >= 0:
            data.letter_grade = suggest_letter_grade(data.score, assessment.max_score, settings.GRADE_BOUNDARIES)

    grade, created = storage.create_grade(data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return {
        "success": True,
        "data": grade,
        "message": "Grade created successfully" if created else "Grade replaced successfully",
    }


# ✅ [UPDATE] 성적 수정
@router.patch("/{grade_id}")
def update_grade(
    grade_id: str,
    data: GradeUpdate,
    user: UserModel = Depends(require_staff),
    storage: DatabaseStorage = Depends(get_storage),
):
    grade = storage.update_grade(grade_id, data, graded_by=user.id)
    return {"success": True, "data": grade, "message": "Grade updated successfully"}


# ✅ [DELETE] 성적 삭제
@router.delete("/{grade_id}", dependencies=[Depends(require_staff)])
def delete_grade(grade_id: str, storage: DatabaseStorage = Depends(get_storage)):
    storage.delete_grade(grade_id)
    return {"success": True, "data": {"grade_id": grade_id, "message": "Grade deleted successfully"}}
