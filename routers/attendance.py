from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from config.settings import settings
from dependencies.security import ensure_can_view_student, require_staff, require_user
from dependencies.storage import get_storage
from models.users import User as UserModel
from schemas.attendance import AttendanceMark, AttendanceRate, AttendanceUpdate, SessionSummary
from services.attendance_recorder import compute_attendance_rate, summarize_session
from services.errors import MissingReferenceError
from services.storage import DatabaseStorage

router = APIRouter(prefix="/attendance", tags=["attendance"])


# ==========================================================
# [1단계] 조회 / 요약
# ==========================================================

# ✅ [READ] 과목 출결 목록 (날짜 필터, 최근 날짜순)
@router.get("/", dependencies=[Depends(require_staff)])
def read_attendance_list(
    course_id: str = Query(..., description="과목 ID (필수)"),
    on_date: Optional[date] = Query(None, alias="date", description="조회할 날짜 (예: 2025-09-17)"),
    storage: DatabaseStorage = Depends(get_storage),
):
    return {"success": True, "data": storage.get_attendance(course_id, on_date)}


# ✅ [SESSION SUMMARY] 특정 과목·날짜 상태별 인원
@router.get("/session-summary", dependencies=[Depends(require_staff)])
def get_session_summary(
    course_id: str,
    on_date: date = Query(..., alias="date", description="조회할 날짜 (예: 2025-09-17)"),
    storage: DatabaseStorage = Depends(get_storage),
):
    records = storage.get_attendance(course_id, on_date)
    summary = SessionSummary(
        course_id=course_id,
        date=on_date,
        total=len(records),
        counts=summarize_session(records),
    )
    return {"success": True, "data": summary}


# ✅ [RATE] 학생 최근 N일 출석률 (과목 필터 가능, 학생 계정은 본인만)
@router.get("/student/{student_id}/rate")
def get_student_attendance_rate(
    student_id: str,
    course_id: Optional[str] = None,
    window_days: Optional[int] = Query(None, ge=0, description="집계 기간(일), 기본값은 설정값"),
    user: UserModel = Depends(require_user),
    storage: DatabaseStorage = Depends(get_storage),
):
    ensure_can_view_student(user, student_id, storage.db)
    if storage.get_student(student_id) is None:
        raise MissingReferenceError("Student", student_id)

    window = settings.ATTENDANCE_WINDOW_DAYS if window_days is None else window_days
    records = storage.get_student_attendance(student_id, course_id, since=date.today() - timedelta(days=window))
    rate = compute_attendance_rate(records, window)

    return {
        "success": True,
        "data": AttendanceRate(
            student_id=student_id,
            course_id=course_id,
            window_days=window,
            total=len(records),
            attendance_rate=rate,
            good_standing=rate >= settings.ATTENDANCE_REQUIRED,
        ),
    }


# ==========================================================
# [2단계] 기록 / 수정 (관리자·교사)
# ==========================================================

# ✅ [UPSERT] 출결 기록 (학생×과목×날짜 당 1건, 재기록 시 덮어쓰기)
@router.post("/")
def mark_attendance(
    data: AttendanceMark,
    response: Response,
    user: UserModel = Depends(require_staff),
    storage: DatabaseStorage = Depends(get_storage),
):
    data.marked_by = user.id
    record, created = storage.mark_attendance(data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return {
        "success": True,
        "data": record,
        "message": "Attendance marked successfully" if created else "Attendance replaced successfully",
    }


# ✅ [UPDATE] 출결 기록 수정
@router.patch("/{attendance_id}")
def update_attendance(
    attendance_id: str,
    data: AttendanceUpdate,
    user: UserModel = Depends(require_staff),
    storage: DatabaseStorage = Depends(get_storage),
):
    record = storage.update_attendance(attendance_id, data, marked_by=user.id)
    return {"success": True, "data": record, "message": "Attendance record updated successfully"}
