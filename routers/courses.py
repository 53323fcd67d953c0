from fastapi import APIRouter, Depends, status

from dependencies.security import require_staff, require_user
from dependencies.storage import get_storage
from schemas.courses import CourseCreate, CourseUpdate
from services.errors import MissingReferenceError
from services.storage import DatabaseStorage

router = APIRouter(prefix="/courses", tags=["courses"])


# ✅ [READ] 전체 과목 조회 (담당 교사 포함)
@router.get("/", dependencies=[Depends(require_user)])
def read_courses(storage: DatabaseStorage = Depends(get_storage)):
    return {"success": True, "data": storage.get_courses()}


# ✅ [READ] 특정 과목 조회
@router.get("/{course_id}", dependencies=[Depends(require_user)])
def read_course(course_id: str, storage: DatabaseStorage = Depends(get_storage)):
    course = storage.get_course(course_id)
    if course is None:
        raise MissingReferenceError("Course", course_id)
    return {"success": True, "data": course}


# ✅ [CREATE] 과목 개설
@router.post("/", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_staff)])
def create_course(data: CourseCreate, storage: DatabaseStorage = Depends(get_storage)):
    course = storage.create_course(data)
    return {"success": True, "data": course, "message": "Course created successfully"}


# ✅ [UPDATE] 과목 수정
@router.patch("/{course_id}", dependencies=[Depends(require_staff)])
def update_course(course_id: str, data: CourseUpdate, storage: DatabaseStorage = Depends(get_storage)):
    course = storage.update_course(course_id, data)
    return {"success": True, "data": course, "message": "Course updated successfully"}


# ✅ [DELETE] 과목 삭제
@router.delete("/{course_id}", dependencies=[Depends(require_staff)])
def delete_course(course_id: str, storage: DatabaseStorage = Depends(get_storage)):
    storage.delete_course(course_id)
    return {"success": True, "data": {"course_id": course_id, "message": "Course deleted successfully"}}
