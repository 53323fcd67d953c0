# tests/test_attendance_recorder.py

from datetime import date, datetime, timedelta

import pytest

from models.attendance import Attendance as AttendanceModel
from schemas.attendance import AttendanceMark, AttendanceOut
from schemas.enums import AttendanceStatus
from services.attendance_recorder import (
    compute_attendance_rate,
    mark_or_replace_attendance,
    summarize_session,
    validate_status,
)
from services.errors import ValidationError

TODAY = date(2025, 9, 17)


def make_record(status, on_date=TODAY, student_id="s001"):
    return AttendanceOut(
        id=f"{student_id}-{on_date}-{status}",
        student_id=student_id,
        course_id="c001",
        date=on_date,
        status=status,
        marked_by="t001",
    )


def make_mark(status, student_id="s001", on_date=TODAY, notes=None, marked_by="t001"):
    return AttendanceMark(
        student_id=student_id, course_id="c001", date=on_date, status=status, notes=notes, marked_by=marked_by
    )


# === validate_status ===


def test_validate_status_accepts_known_values():
    assert validate_status("LATE") is AttendanceStatus.LATE
    assert validate_status(AttendanceStatus.EXCUSED) is AttendanceStatus.EXCUSED


@pytest.mark.parametrize("status", ["present", "TARDY", "", None])
def test_validate_status_rejects_unknown_values(status):
    with pytest.raises(ValidationError):
        validate_status(status)


# === mark_or_replace_attendance ===


def test_mark_new_attendance():
    record, created = mark_or_replace_attendance(None, make_mark("PRESENT", notes="on time"))
    assert created
    assert record.status == "PRESENT"
    assert record.notes == "on time"
    assert record.marked_by == "t001"


def test_replace_overwrites_status_without_merging():
    first_marked = datetime(2025, 9, 17, 9, 0)
    existing = AttendanceModel(
        student_id="s001", course_id="c001", date=TODAY, status="PRESENT",
        notes="on time", marked_by="t001", marked_at=first_marked,
    )
    now = datetime(2025, 9, 17, 9, 30)

    record, created = mark_or_replace_attendance(existing, make_mark("ABSENT", marked_by="t002"), now=now)

    assert not created
    assert record is existing
    assert record.status == "ABSENT"
    assert record.notes is None
    assert record.marked_by == "t002"
    assert record.marked_at == now


def test_unknown_status_rejected_before_mutation():
    existing = AttendanceModel(student_id="s001", course_id="c001", date=TODAY, status="PRESENT", marked_by="t001")
    with pytest.raises(ValidationError):
        mark_or_replace_attendance(existing, make_mark("SICK"))
    assert existing.status == "PRESENT"


def test_mismatched_key_rejected():
    existing = AttendanceModel(student_id="s001", course_id="c001", date=TODAY, status="PRESENT", marked_by="t001")
    with pytest.raises(ValidationError):
        mark_or_replace_attendance(existing, make_mark("LATE", on_date=TODAY - timedelta(days=1)))


# === summarize_session ===


def test_summarize_session_counts_each_status():
    records = (
        [make_record("PRESENT", student_id=f"p{i}") for i in range(6)]
        + [make_record("ABSENT", student_id=f"a{i}") for i in range(2)]
        + [make_record("LATE", student_id="l0"), make_record("EXCUSED", student_id="e0")]
    )
    counts = summarize_session(records)
    assert counts == {"PRESENT": 6, "ABSENT": 2, "LATE": 1, "EXCUSED": 1}
    assert sum(counts.values()) == len(records) == 10


def test_summarize_empty_session_has_all_statuses():
    assert summarize_session([]) == {"PRESENT": 0, "ABSENT": 0, "LATE": 0, "EXCUSED": 0}


# === compute_attendance_rate ===


def test_attendance_rate_27_of_30():
    records = [make_record("PRESENT", TODAY - timedelta(days=i)) for i in range(27)]
    records += [make_record("ABSENT", TODAY - timedelta(days=i)) for i in range(3)]
    assert compute_attendance_rate(records, 30, today=TODAY) == 90.0


def test_attendance_rate_empty_is_zero():
    assert compute_attendance_rate([]) == 0


def test_attendance_rate_rounds_half_up():
    # 2/3 = 66.666… → 66.7, 1/8 = 12.5 그대로, 1/16 = 6.25 → 6.3
    assert compute_attendance_rate([make_record("PRESENT"), make_record("PRESENT"), make_record("LATE")]) == 66.7
    assert compute_attendance_rate([make_record("PRESENT")] + [make_record("ABSENT")] * 7) == 12.5
    assert compute_attendance_rate([make_record("PRESENT")] + [make_record("ABSENT")] * 15) == 6.3


def test_attendance_rate_window_excludes_old_records():
    records = [
        make_record("PRESENT", TODAY - timedelta(days=1)),
        make_record("ABSENT", TODAY - timedelta(days=45)),
    ]
    assert compute_attendance_rate(records, 30, today=TODAY) == 100.0
    assert compute_attendance_rate(records, today=TODAY) == 50.0


def test_attendance_rate_negative_window_rejected():
    with pytest.raises(ValidationError):
        compute_attendance_rate([], -1)
