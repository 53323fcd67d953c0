from typing import Optional

from fastapi import APIRouter, Depends, status

from dependencies.security import require_staff, require_user
from dependencies.storage import get_storage
from schemas.assessments import AssessmentCreate, AssessmentUpdate
from services.storage import DatabaseStorage

router = APIRouter(prefix="/assessments", tags=["assessments"])


# ✅ [READ] 평가 항목 조회 (과목 필터)
@router.get("/", dependencies=[Depends(require_user)])
def read_assessments(course_id: Optional[str] = None, storage: DatabaseStorage = Depends(get_storage)):
    return {"success": True, "data": storage.get_assessments(course_id)}


# ✅ [CREATE] 평가 항목 추가
@router.post("/", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_staff)])
def create_assessment(data: AssessmentCreate, storage: DatabaseStorage = Depends(get_storage)):
    assessment = storage.create_assessment(data)
    return {"success": True, "data": assessment, "message": "Assessment created successfully"}


# ✅ [UPDATE] 평가 항목 수정
@router.patch("/{assessment_id}", dependencies=[Depends(require_staff)])
def update_assessment(assessment_id: str, data: AssessmentUpdate, storage: DatabaseStorage = Depends(get_storage)):
    assessment = storage.update_assessment(assessment_id, data)
    return {"success": True, "data": assessment, "message": "Assessment updated successfully"}


# ✅ [DELETE] 평가 항목 삭제 (해당 성적도 함께 삭제)
@router.delete("/{assessment_id}", dependencies=[Depends(require_staff)])
def delete_assessment(assessment_id: str, storage: DatabaseStorage = Depends(get_storage)):
    storage.delete_assessment(assessment_id)
    return {"success": True, "data": {"assessment_id": assessment_id, "message": "Assessment deleted successfully"}}
