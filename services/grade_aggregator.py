"""
services/grade_aggregator.py

- 과목 단위 가중 백분율 계산과 등급(letter grade) 변환
- 학생×평가 성적 upsert 정책 (있으면 교체, 없으면 생성)

집계 정책
  * 성적이 없는 평가는 0점으로 계산한다 (분모에서 제외하지 않음)
  * 만점을 넘는 점수는 그대로 반영한다 (100% 초과 가능, 클램핑 없음)
  * weight / max_score 가 0 이하인 평가는 집계에서 제외한다
  * 입력된 평가 목록에 포함된 assessment_id 의 성적만 합산한다

upsert 원자성은 호출 측 저장소(services/storage.py)가 보장해야 한다.
(유니크 제약 + 트랜잭션 안의 조회→적용, 충돌 시 재적용)
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from models.grades import Grade as GradeModel
from schemas.grades import CourseGradebook, GradeCreate, StudentCourseGrade
from services.errors import ConfigError, ValidationError
from utils.numbers import round_half_up, to_decimal

logger = logging.getLogger(__name__)

# 등급 → 최소 백분율(포함). 가장 낮은 기준 미만은 FALLBACK_GRADE
DEFAULT_BOUNDARIES: Dict[str, float] = {"A": 90, "B": 80, "C": 70, "D": 60}
FALLBACK_GRADE = "F"

_ZERO = Decimal(0)
_HUNDRED = Decimal(100)

# grades.score 는 Numeric(5, 2): 0.01 단위, 1000 미만
SCORE_QUANTUM = Decimal("0.01")
SCORE_LIMIT = Decimal(1000)


# ==========================================================
# [1] 등급 경계 검증 / 등급 변환
# ==========================================================

def validate_boundaries(
    boundaries: Optional[Mapping[str, float]] = None,
    fallback: str = FALLBACK_GRADE,
) -> List[Tuple[str, Decimal]]:
    """
    등급 경계표를 (등급, 최소값) 내림차순 리스트로 검증/변환한다.
    - 선언 순서대로 엄격한 내림차순이어야 함 (예: A:90, B:80, ...)
    - fallback 등급(F)이 키로 들어 있으면 암묵적 하한으로 보고 무시
    """
    if boundaries is None:
        boundaries = DEFAULT_BOUNDARIES

    table: List[Tuple[str, Decimal]] = []
    for letter, minimum in boundaries.items():
        if letter == fallback:
            continue
        try:
            threshold = to_decimal(minimum)
        except ValueError:
            raise ConfigError(f"grade boundary {letter!r} is not a number: {minimum!r}")
        if not threshold.is_finite():
            raise ConfigError(f"grade boundary {letter!r} must be finite")
        if table and threshold >= table[-1][1]:
            prev_letter, prev_threshold = table[-1]
            raise ConfigError(
                f"grade boundaries must be strictly descending: "
                f"{letter}={threshold} follows {prev_letter}={prev_threshold}"
            )
        table.append((letter, threshold))

    if not table:
        raise ConfigError("grade boundaries must define at least one letter above the fallback grade")
    return table


def letter_grade_for(
    percentage,
    boundaries: Optional[Mapping[str, float]] = None,
    fallback: str = FALLBACK_GRADE,
) -> str:
    """백분율 → 등급. 높은 기준부터 비교해 처음으로 충족하는 등급, 없으면 fallback"""
    table = validate_boundaries(boundaries, fallback)
    try:
        value = to_decimal(percentage)
    except ValueError:
        raise ValidationError(f"percentage is not a number: {percentage!r}")
    if not value.is_finite():
        raise ValidationError(f"percentage must be finite: {percentage!r}")

    for letter, threshold in table:
        if value >= threshold:
            return letter
    return fallback


def suggest_letter_grade(score, max_score, boundaries: Optional[Mapping[str, float]] = None) -> str:
    """단일 평가 점수 기준 등급 (성적 입력 시 등급을 지정하지 않은 경우 사용)"""
    max_value = to_decimal(max_score)
    if max_value <= 0:
        raise ValidationError("max_score must be greater than 0")
    return letter_grade_for(to_decimal(score) / max_value * _HUNDRED, boundaries)


# ==========================================================
# [2] 가중 백분율 계산
# ==========================================================

def _type_name(value) -> str:
    return getattr(value, "value", value)


def compute_course_percentage(
    assessments: Iterable,
    grades: Iterable,
    student_id: str,
    assessment_types: Optional[Iterable] = None,
) -> float:
    """
    학생 1명의 과목 가중 백분율.
      total_earned   += score × weight
      total_possible += max_score × weight
      percentage = total_earned / total_possible × 100  (total_possible 이 0이면 0)
    assessment_types 를 주면 해당 유형의 평가만 집계한다 (빈 목록이면 집계 대상 없음 → 0).
    """
    wanted = {_type_name(t) for t in assessment_types} if assessment_types is not None else None

    # 해당 학생의 성적만 assessment_id 기준으로 색인
    scores = {g.assessment_id: g.score for g in grades if g.student_id == student_id}

    total_earned = _ZERO
    total_possible = _ZERO
    for assessment in assessments:
        if wanted is not None and _type_name(assessment.type) not in wanted:
            continue

        max_score = to_decimal(assessment.max_score)
        weight = to_decimal(assessment.weight)
        if max_score <= 0 or weight <= 0:
            logger.warning(
                f"집계 제외 - 비정상 평가: assessment_id={assessment.id}, "
                f"max_score={max_score}, weight={weight}"
            )
            continue

        score = to_decimal(scores.get(assessment.id, _ZERO))
        total_earned += score * weight
        total_possible += max_score * weight

    if total_possible <= 0:
        return 0.0
    return float(total_earned / total_possible * _HUNDRED)


def course_gradebook(
    assessments: Iterable,
    grades: Iterable,
    student_ids: Iterable[str],
    boundaries: Optional[Mapping[str, float]] = None,
    course_id: Optional[str] = None,
) -> CourseGradebook:
    """과목 성적부: 학생별 백분율/등급 + 반 평균"""
    assessments = list(assessments)
    grades = list(grades)
    validate_boundaries(boundaries)

    rows = []
    for student_id in student_ids:
        percentage = compute_course_percentage(assessments, grades, student_id)
        rows.append(
            StudentCourseGrade(
                student_id=student_id,
                percentage=round_half_up(percentage),
                letter_grade=letter_grade_for(percentage, boundaries),
            )
        )

    class_average = round_half_up(sum(r.percentage for r in rows) / len(rows)) if rows else 0.0
    return CourseGradebook(
        course_id=course_id,
        assessment_count=len(assessments),
        students=rows,
        class_average=class_average,
    )


# ==========================================================
# [3] 성적 upsert 정책
# ==========================================================

def validate_score(score) -> Decimal:
    """점수 검증. grades.score 컬럼(Numeric(5, 2))에 그대로 들어가는 값만 허용 (반올림 저장 없음)"""
    try:
        value = to_decimal(score)
    except ValueError:
        raise ValidationError(f"score is not a number: {score!r}")
    if not value.is_finite():
        raise ValidationError("score must be finite")
    if value < 0:
        raise ValidationError(f"score must not be negative: {score}")
    if value >= SCORE_LIMIT:
        raise ValidationError(f"score must be less than {SCORE_LIMIT}: {score}")
    if value != value.quantize(SCORE_QUANTUM):
        raise ValidationError(f"score allows at most 2 decimal places: {score}")
    return value.quantize(SCORE_QUANTUM)


def create_or_replace_grade(
    existing: Optional[GradeModel],
    incoming: GradeCreate,
    now: Optional[datetime] = None,
) -> Tuple[GradeModel, bool]:
    """
    (student_id, assessment_id) 기준 성적 생성 또는 교체.
    - existing 이 있으면 score / letter_grade / feedback / graded_by 교체 + updated_at 갱신
    - 없으면 새 Grade 생성
    반환: (grade, created 여부). 검증은 변경 전에 모두 끝낸다.
    """
    score = validate_score(incoming.score)
    if not incoming.graded_by:
        raise ValidationError("graded_by is required")
    now = now or datetime.utcnow()

    if existing is not None:
        if (existing.student_id, existing.assessment_id) != (incoming.student_id, incoming.assessment_id):
            raise ValidationError("existing grade does not match the incoming (student_id, assessment_id)")
        existing.score = score
        existing.letter_grade = incoming.letter_grade
        existing.feedback = incoming.feedback
        existing.graded_by = incoming.graded_by
        existing.updated_at = now
        return existing, False

    grade = GradeModel(
        student_id=incoming.student_id,
        assessment_id=incoming.assessment_id,
        score=score,
        letter_grade=incoming.letter_grade,
        feedback=incoming.feedback,
        graded_by=incoming.graded_by,
        graded_at=now,
        updated_at=now,
    )
    return grade, True
