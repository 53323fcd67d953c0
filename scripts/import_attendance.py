import csv
import sys
from datetime import datetime

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from database.db import SessionLocal, init_db
from schemas.attendance import AttendanceMark
from services.errors import RecordError, ValidationError
from services.storage import DatabaseStorage

CSV_PATH = "data/attendance.csv"  # ✅ 파일 경로 (student_id, course_id, date, status, notes)


def import_attendance(db: Session, csv_path: str, marked_by: str):
    """
    출결 CSV → DB. 학생×과목×날짜 upsert 이므로 재실행 시 마지막 값으로 덮어씀.
    잘못된 행은 줄 번호를 담은 ValidationError 로 중단
    """
    storage = DatabaseStorage(db)
    counts = {"created": 0, "replaced": 0}

    with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.DictReader(csvfile)
        for row in reader:
            line = reader.line_num
            try:
                _, created = storage.mark_attendance(
                    AttendanceMark(
                        student_id=row["student_id"],                              # 학생 ID
                        course_id=row["course_id"],                                # 과목 ID
                        date=datetime.strptime(row["date"], "%Y-%m-%d").date(),    # 날짜
                        status=row["status"].strip().upper(),                      # PRESENT / ABSENT / LATE / EXCUSED
                        notes=row.get("notes") or None,                            # 비고
                        marked_by=marked_by,
                    )
                )
            except (KeyError, ValueError, TypeError, AttributeError, PydanticValidationError) as e:
                raise ValidationError(f"{csv_path} line {line}: invalid attendance row ({e})") from e
            except RecordError as e:
                raise ValidationError(f"{csv_path} line {line}: {e.message}") from e
            counts["created" if created else "replaced"] += 1
    return counts


if __name__ == "__main__":
    # 사용법: python -m scripts.import_attendance <기록자 user_id> [csv 경로]
    init_db()
    db = SessionLocal()
    try:
        result = import_attendance(db, sys.argv[2] if len(sys.argv) > 2 else CSV_PATH, marked_by=sys.argv[1])
    finally:
        db.close()
    print(f"✅ 출결 CSV → DB 반영 완료 (생성 {result['created']}건, 교체 {result['replaced']}건)")
