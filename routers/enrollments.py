from typing import Optional

from fastapi import APIRouter, Depends, status

from dependencies.security import ensure_can_view_student, require_staff, require_user
from dependencies.storage import get_storage
from models.users import User as UserModel
from schemas.enrollments import EnrollmentCreate
from schemas.enums import UserRole
from services.errors import PermissionDeniedError
from services.storage import DatabaseStorage

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


# ✅ [READ] 수강 목록 (과목/학생 필터). 학생 계정은 본인 것만
@router.get("/")
def read_enrollments(
    course_id: Optional[str] = None,
    student_id: Optional[str] = None,
    user: UserModel = Depends(require_user),
    storage: DatabaseStorage = Depends(get_storage),
):
    if user.role == UserRole.STUDENT.value:
        if not student_id:
            raise PermissionDeniedError("students must filter enrollments by their own student_id")
        ensure_can_view_student(user, student_id, storage.db)
    return {"success": True, "data": storage.get_enrollments(course_id, student_id)}


# ✅ [CREATE] 수강 등록
@router.post("/", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_staff)])
def create_enrollment(data: EnrollmentCreate, storage: DatabaseStorage = Depends(get_storage)):
    enrollment = storage.create_enrollment(data)
    return {"success": True, "data": enrollment, "message": "Enrollment created successfully"}


# ✅ [DELETE] 수강 취소
@router.delete("/{student_id}/{course_id}", dependencies=[Depends(require_staff)])
def delete_enrollment(student_id: str, course_id: str, storage: DatabaseStorage = Depends(get_storage)):
    storage.delete_enrollment(student_id, course_id)
    return {
        "success": True,
        "data": {"student_id": student_id, "course_id": course_id, "message": "Enrollment deleted successfully"},
    }
