# tests/test_grade_aggregator.py

from datetime import datetime
from decimal import Decimal

import pytest

from models.grades import Grade as GradeModel
from schemas.assessments import AssessmentOut
from schemas.enums import AssessmentType
from schemas.grades import GradeCreate, GradeOut
from services.errors import ConfigError, ValidationError
from services.grade_aggregator import (
    DEFAULT_BOUNDARIES,
    compute_course_percentage,
    course_gradebook,
    create_or_replace_grade,
    letter_grade_for,
    suggest_letter_grade,
    validate_boundaries,
    validate_score,
)


def make_assessment(id, max_score, weight=1.0, type=AssessmentType.QUIZ, course_id="c001"):
    return AssessmentOut(id=id, course_id=course_id, name=id, type=type, max_score=max_score, weight=weight)


def make_grade(student_id, assessment_id, score):
    return GradeOut(
        id=f"{student_id}-{assessment_id}",
        student_id=student_id,
        assessment_id=assessment_id,
        score=score,
        graded_by="t001",
    )


@pytest.fixture
def midterm_and_quiz():
    return [
        make_assessment("midterm", 100, 1.0, AssessmentType.MIDTERM),
        make_assessment("quiz", 50, 0.5, AssessmentType.QUIZ),
    ]


# === compute_course_percentage ===


def test_empty_assessment_set_is_zero():
    assert compute_course_percentage([], [make_grade("s001", "a001", 90)], "s001") == 0


def test_full_marks_is_one_hundred(midterm_and_quiz):
    grades = [make_grade("s001", "midterm", 100), make_grade("s001", "quiz", 50)]
    assert compute_course_percentage(midterm_and_quiz, grades, "s001") == 100


def test_ungraded_assessment_counts_as_zero(midterm_and_quiz):
    # 80*1 + 0*0.5 = 80 / (100*1 + 50*0.5 = 125) → 64%
    grades = [make_grade("s001", "midterm", 80)]
    percentage = compute_course_percentage(midterm_and_quiz, grades, "s001")
    assert percentage == pytest.approx(64.0)
    assert letter_grade_for(percentage) == "D"


def test_only_subject_student_grades_are_used(midterm_and_quiz):
    grades = [make_grade("s002", "midterm", 100), make_grade("s002", "quiz", 50)]
    assert compute_course_percentage(midterm_and_quiz, grades, "s001") == 0


def test_grades_for_assessments_outside_the_set_are_ignored(midterm_and_quiz):
    grades = [make_grade("s001", "midterm", 50), make_grade("s001", "other-course-final", 100)]
    assert compute_course_percentage(midterm_and_quiz, grades, "s001") == pytest.approx(40.0)


def test_score_above_max_is_not_clamped():
    assessments = [make_assessment("bonus", 10)]
    assert compute_course_percentage(assessments, [make_grade("s001", "bonus", 12)], "s001") == pytest.approx(120.0)


def test_degenerate_assessments_are_excluded():
    assessments = [
        make_assessment("zero-weight", 100, 0),
        make_assessment("zero-max", 0, 1),
        make_assessment("ok", 20, 1),
    ]
    grades = [make_grade("s001", "zero-weight", 100), make_grade("s001", "ok", 15)]
    assert compute_course_percentage(assessments, grades, "s001") == pytest.approx(75.0)


def test_only_degenerate_assessments_is_zero():
    assessments = [make_assessment("zero-weight", 100, 0)]
    assert compute_course_percentage(assessments, [make_grade("s001", "zero-weight", 100)], "s001") == 0


def test_assessment_type_filter(midterm_and_quiz):
    grades = [make_grade("s001", "midterm", 70), make_grade("s001", "quiz", 50)]
    assert compute_course_percentage(midterm_and_quiz, grades, "s001", [AssessmentType.QUIZ]) == 100
    assert compute_course_percentage(midterm_and_quiz, grades, "s001", ["MIDTERM"]) == pytest.approx(70.0)


def test_empty_type_filter_selects_nothing(midterm_and_quiz):
    grades = [make_grade("s001", "midterm", 70), make_grade("s001", "quiz", 50)]
    assert compute_course_percentage(midterm_and_quiz, grades, "s001", []) == 0.0
    assert compute_course_percentage(midterm_and_quiz, grades, "s001", None) == pytest.approx(76.0)


def test_works_with_orm_decimal_values():
    assessments = [make_assessment("a001", 40, 1)]
    grade = GradeModel(student_id="s001", assessment_id="a001", score=Decimal("30.00"), graded_by="t001")
    assert compute_course_percentage(assessments, [grade], "s001") == pytest.approx(75.0)


# === letter_grade_for ===


@pytest.mark.parametrize(
    "percentage, letter",
    [(92, "A"), (90, "A"), (89.9, "B"), (80, "B"), (75, "C"), (60, "D"), (59.9, "F"), (0, "F"), (130, "A")],
)
def test_default_boundaries(percentage, letter):
    assert letter_grade_for(percentage, DEFAULT_BOUNDARIES) == letter


def test_default_boundaries_used_when_none():
    assert letter_grade_for(85) == "B"


def test_custom_boundaries():
    boundaries = {"A": 93, "B": 85, "C": 77, "D": 70}
    assert letter_grade_for(92, boundaries) == "B"
    assert letter_grade_for(69.99, boundaries) == "F"


def test_non_descending_boundaries_rejected():
    with pytest.raises(ConfigError):
        letter_grade_for(85, {"A": 80, "B": 90, "C": 70, "D": 60})


def test_equal_thresholds_rejected():
    with pytest.raises(ConfigError):
        validate_boundaries({"A": 90, "B": 90})


def test_non_numeric_threshold_rejected():
    with pytest.raises(ConfigError):
        validate_boundaries({"A": "ninety"})


def test_explicit_fallback_key_is_ignored():
    table = validate_boundaries({"A": 90, "B": 80, "C": 70, "D": 60, "F": 0})
    assert [letter for letter, _ in table] == ["A", "B", "C", "D"]


def test_suggest_letter_grade_per_assessment():
    assert suggest_letter_grade(45, 50) == "A"
    assert suggest_letter_grade(Decimal("29.5"), Decimal("50")) == "F"
    with pytest.raises(ValidationError):
        suggest_letter_grade(10, 0)


# === course_gradebook ===


def test_course_gradebook(midterm_and_quiz):
    grades = [
        make_grade("s001", "midterm", 100),
        make_grade("s001", "quiz", 50),
        make_grade("s002", "midterm", 80),
    ]
    book = course_gradebook(midterm_and_quiz, grades, ["s001", "s002"], course_id="c001")

    rows = {r.student_id: r for r in book.students}
    assert rows["s001"].percentage == 100.0
    assert rows["s001"].letter_grade == "A"
    assert rows["s002"].percentage == 64.0
    assert rows["s002"].letter_grade == "D"
    assert book.class_average == 82.0
    assert book.assessment_count == 2


def test_course_gradebook_without_students():
    book = course_gradebook([], [], [])
    assert book.students == []
    assert book.class_average == 0.0


# === create_or_replace_grade ===


def test_create_new_grade():
    incoming = GradeCreate(student_id="s001", assessment_id="a001", score=Decimal("88"), graded_by="t001")
    grade, created = create_or_replace_grade(None, incoming)
    assert created
    assert grade.score == Decimal("88")
    assert grade.graded_by == "t001"


def test_replace_existing_grade():
    graded_at = datetime(2025, 9, 1, 9, 0)
    existing = GradeModel(
        student_id="s001", assessment_id="a001", score=Decimal("50"), letter_grade="F",
        feedback="redo", graded_by="t001", graded_at=graded_at, updated_at=graded_at,
    )
    incoming = GradeCreate(
        student_id="s001", assessment_id="a001", score=Decimal("91"), letter_grade="A",
        feedback=None, graded_by="t002",
    )
    now = datetime(2025, 9, 2, 10, 0)

    grade, created = create_or_replace_grade(existing, incoming, now=now)

    assert not created
    assert grade is existing
    assert grade.score == Decimal("91")
    assert grade.letter_grade == "A"
    assert grade.feedback is None
    assert grade.graded_by == "t002"
    assert grade.updated_at == now
    assert grade.graded_at == graded_at


def test_negative_score_rejected_before_mutation():
    existing = GradeModel(student_id="s001", assessment_id="a001", score=Decimal("50"), graded_by="t001")
    incoming = GradeCreate(student_id="s001", assessment_id="a001", score=Decimal("-1"), graded_by="t002")
    with pytest.raises(ValidationError):
        create_or_replace_grade(existing, incoming)
    assert existing.score == Decimal("50")
    assert existing.graded_by == "t001"


def test_mismatched_key_rejected():
    existing = GradeModel(student_id="s001", assessment_id="a001", score=Decimal("50"), graded_by="t001")
    incoming = GradeCreate(student_id="s002", assessment_id="a001", score=Decimal("70"), graded_by="t001")
    with pytest.raises(ValidationError):
        create_or_replace_grade(existing, incoming)


# === validate_score ===


@pytest.mark.parametrize("score, stored", [("0", "0.00"), ("80.5", "80.50"), ("999.99", "999.99"), (77, "77.00")])
def test_validate_score_fits_column(score, stored):
    assert validate_score(score) == Decimal(stored)
    assert str(validate_score(score)) == stored


@pytest.mark.parametrize("score", ["79.996", "0.001", "1000", "123456.5", "-0.01", "abc", "NaN"])
def test_validate_score_rejects_values_the_column_cannot_hold(score):
    with pytest.raises(ValidationError):
        validate_score(score)


def test_too_precise_score_rejected_before_mutation():
    existing = GradeModel(student_id="s001", assessment_id="a001", score=Decimal("50"), graded_by="t001")
    incoming = GradeCreate(student_id="s001", assessment_id="a001", score=Decimal("79.996"), graded_by="t002")
    with pytest.raises(ValidationError):
        create_or_replace_grade(existing, incoming)
    assert existing.score == Decimal("50")
