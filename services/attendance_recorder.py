"""
services/attendance_recorder.py

- 학생×과목×날짜 당 출결 1건 유지 (있으면 덮어쓰기, 마지막 기록이 우선)
- 출결 현황(상태별 인원)과 출석률 계산
"""

from collections import Counter
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from models.attendance import Attendance as AttendanceModel
from schemas.attendance import AttendanceMark
from schemas.enums import AttendanceStatus
from services.errors import ValidationError
from utils.numbers import round_half_up


def validate_status(status) -> AttendanceStatus:
    """PRESENT / ABSENT / LATE / EXCUSED 외의 값은 ValidationError"""
    try:
        return AttendanceStatus(getattr(status, "value", status))
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"unknown attendance status {status!r} (allowed: {allowed})")


def mark_or_replace_attendance(
    existing: Optional[AttendanceModel],
    incoming: AttendanceMark,
    now: Optional[datetime] = None,
) -> Tuple[AttendanceModel, bool]:
    """
    (student_id, course_id, date) 기준 출결 기록 또는 덮어쓰기.
    - existing 이 있으면 status / notes / marked_by 교체 + marked_at 갱신 (상태 병합 없음)
    - 없으면 새 Attendance 생성
    반환: (attendance, created 여부)
    """
    status = validate_status(incoming.status)
    if not incoming.marked_by:
        raise ValidationError("marked_by is required")
    now = now or datetime.utcnow()

    if existing is not None:
        key = (existing.student_id, existing.course_id, existing.date)
        if key != (incoming.student_id, incoming.course_id, incoming.date):
            raise ValidationError("existing attendance does not match the incoming (student_id, course_id, date)")
        existing.status = status.value
        existing.notes = incoming.notes
        existing.marked_by = incoming.marked_by
        existing.marked_at = now
        return existing, False

    record = AttendanceModel(
        student_id=incoming.student_id,
        course_id=incoming.course_id,
        date=incoming.date,
        status=status.value,
        notes=incoming.notes,
        marked_by=incoming.marked_by,
        marked_at=now,
    )
    return record, True


def summarize_session(records: Iterable) -> Dict[str, int]:
    """상태별 인원 (네 가지 상태 모두 0으로 시작). 합계 == 레코드 수"""
    counts = {s.value: 0 for s in AttendanceStatus}
    for record in records:
        counts[validate_status(record.status).value] += 1
    return counts


def compute_attendance_rate(
    records: Iterable,
    window_days: Optional[int] = None,
    today: Optional[date] = None,
) -> float:
    """
    출석률 = PRESENT / 전체 × 100, 소수 첫째 자리 반올림(half-up). 기록이 없으면 0.
    window_days 를 주면 date >= today - window_days 인 기록만 사용한다.
    """
    if window_days is not None:
        if window_days < 0:
            raise ValidationError("window_days must not be negative")
        since = (today or date.today()) - timedelta(days=window_days)
        records = [r for r in records if r.date >= since]

    status_counter = Counter(getattr(r.status, "value", r.status) for r in records)
    total = sum(status_counter.values())
    if not total:
        return 0.0
    present = Decimal(status_counter[AttendanceStatus.PRESENT.value])
    return round_half_up(present / Decimal(total) * 100)
