import csv
import sys

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from database.db import SessionLocal, init_db
from schemas.grades import GradeCreate
from services.errors import RecordError, ValidationError
from services.storage import DatabaseStorage
from utils.numbers import to_decimal

CSV_PATH = "data/grades.csv"  # ✅ 파일 경로 (student_id, assessment_id, score, letter_grade, feedback)


def import_grades(db: Session, csv_path: str, graded_by: str):
    """
    성적 CSV → DB. 행마다 학생×평가 upsert 를 거치므로 같은 파일을 다시 넣어도 중복 행이 생기지 않음.
    잘못된 행을 만나면 그 줄 번호를 담은 ValidationError 로 중단 (앞 행들은 이미 반영됨 → 수정 후 재실행)
    반환: {"created": n, "replaced": m}
    """
    storage = DatabaseStorage(db)
    counts = {"created": 0, "replaced": 0}

    with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.DictReader(csvfile)
        for row in reader:
            line = reader.line_num
            try:
                _, created = storage.create_grade(
                    GradeCreate(
                        student_id=row["student_id"],                 # 학생 ID
                        assessment_id=row["assessment_id"],           # 평가 ID
                        score=to_decimal(row["score"]),               # 점수
                        letter_grade=row.get("letter_grade") or None,  # 등급 (선택)
                        feedback=row.get("feedback") or None,          # 피드백 (선택)
                        graded_by=graded_by,
                    )
                )
            except (KeyError, ValueError, PydanticValidationError) as e:
                raise ValidationError(f"{csv_path} line {line}: invalid grade row ({e})") from e
            except RecordError as e:
                raise ValidationError(f"{csv_path} line {line}: {e.message}") from e
            counts["created" if created else "replaced"] += 1
    return counts


if __name__ == "__main__":
    # 사용법: python -m scripts.import_grades <채점자 user_id> [csv 경로]
    init_db()
    db = SessionLocal()
    try:
        result = import_grades(db, sys.argv[2] if len(sys.argv) > 2 else CSV_PATH, graded_by=sys.argv[1])
    finally:
        db.close()
    print(f"✅ 성적 CSV → DB 반영 완료 (생성 {result['created']}건, 교체 {result['replaced']}건)")
