from fastapi import APIRouter, Depends, status

from dependencies.security import ensure_can_view_student, require_staff, require_user
from dependencies.storage import get_storage
from models.users import User as UserModel
from schemas.students import StudentCreate, StudentUpdate
from services.errors import MissingReferenceError
from services.storage import DatabaseStorage

router = APIRouter(prefix="/students", tags=["students"])


# ==========================================================
# [1단계] 조회
# ==========================================================

# ✅ [READ] 전체 학생 조회 (최근 등록순)
@router.get("/", dependencies=[Depends(require_staff)])
def read_students(storage: DatabaseStorage = Depends(get_storage)):
    return {"success": True, "data": storage.get_students()}


# ✅ [READ] 특정 학생 조회 (학생 계정은 본인만)
@router.get("/{student_id}")
def read_student(
    student_id: str,
    user: UserModel = Depends(require_user),
    storage: DatabaseStorage = Depends(get_storage),
):
    ensure_can_view_student(user, student_id, storage.db)
    student = storage.get_student(student_id)
    if student is None:
        raise MissingReferenceError("Student", student_id)
    return {"success": True, "data": student}


# ==========================================================
# [2단계] 등록 / 수정 / 삭제 (관리자·교사)
# ==========================================================

# ✅ [CREATE] 학생 등록
@router.post("/", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_staff)])
def create_student(data: StudentCreate, storage: DatabaseStorage = Depends(get_storage)):
    student = storage.create_student(data)
    return {"success": True, "data": student, "message": "Student created successfully"}


# ✅ [UPDATE] 학생 정보 수정 (부분 수정)
@router.patch("/{student_id}", dependencies=[Depends(require_staff)])
def update_student(student_id: str, data: StudentUpdate, storage: DatabaseStorage = Depends(get_storage)):
    student = storage.update_student(student_id, data)
    return {"success": True, "data": student, "message": "Student updated successfully"}


# ✅ [DELETE] 학생 삭제 (출결/성적/수강 기록도 함께 삭제)
@router.delete("/{student_id}", dependencies=[Depends(require_staff)])
def delete_student(student_id: str, storage: DatabaseStorage = Depends(get_storage)):
    storage.delete_student(student_id)
    return {"success": True, "data": {"student_id": student_id, "message": "Student deleted successfully"}}
