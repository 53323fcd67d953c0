"""
services/storage.py

- SQLAlchemy Session 위에서 동작하는 저장소 계층 (라우터/스크립트 공용)
- 조인 조회 결과는 이름 있는 스키마(StudentWithUser, GradeWithStudentAndAssessment ...)로 반환
- 성적/출결 upsert 원자성
    1) 참조(student/course/assessment) 존재 확인 및 입력 검증 → 변경 전에 모두 끝냄
    2) 트랜잭션 안에서 기존 행을 FOR UPDATE 로 조회 후 코어 교체 정책 적용
    3) 동시 요청이 먼저 INSERT 해서 유니크 제약에 걸리면 rollback → 기존 행 재조회 → 재적용
       (마지막 요청 값이 남음, 중복 행은 유니크 제약이 최종적으로 막음)
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, lazyload

from models.assessments import Assessment as AssessmentModel
from models.attendance import Attendance as AttendanceModel
from models.courses import Course as CourseModel
from models.enrollments import Enrollment as EnrollmentModel
from models.grades import Grade as GradeModel
from models.students import Student as StudentModel
from models.users import User as UserModel
from schemas.assessments import AssessmentCreate, AssessmentOut, AssessmentUpdate
from schemas.attendance import AttendanceMark, AttendanceOut, AttendanceUpdate, AttendanceWithStudent
from schemas.courses import CourseCreate, CourseOut, CourseUpdate, CourseWithTeacher
from schemas.enrollments import EnrollmentCreate, EnrollmentOut, EnrollmentWithStudentAndCourse
from schemas.grades import GradeCreate, GradeOut, GradeUpdate, GradeWithStudentAndAssessment
from schemas.stats import DashboardStats
from schemas.students import StudentCreate, StudentOut, StudentUpdate, StudentWithUser
from schemas.users import UserOut, UserUpsert
from services.attendance_recorder import compute_attendance_rate, mark_or_replace_attendance, validate_status
from services.errors import MissingReferenceError, ValidationError
from services.grade_aggregator import create_or_replace_grade, validate_score
from utils.numbers import round_half_up

logger = logging.getLogger(__name__)


class DatabaseStorage:
    def __init__(self, db: Session):
        self.db = db

    # ==========================================================
    # [공통] 헬퍼
    # ==========================================================
    def _require(self, model, entity_id, entity: str):
        row = self.db.get(model, entity_id)
        if row is None:
            raise MissingReferenceError(entity, entity_id)
        return row

    def _commit(self, what: str):
        # 유니크 제약 위반(중복 학번/과목코드 등)은 입력 오류로 변환
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ValidationError(f"{what} violates a uniqueness or reference constraint: {e.orig}")

    def _upsert(self, lookup: Callable[[], Query], apply: Callable, what: str):
        existing = lookup().with_for_update().one_or_none()
        record, created = apply(existing)
        if created:
            self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # 동시 요청이 같은 키로 먼저 INSERT 한 경우 → 그 행에 교체 정책 재적용
            self.db.rollback()
            existing = lookup().with_for_update().one_or_none()
            if existing is None:
                raise
            logger.info(f"{what} upsert 충돌 → 기존 행 교체로 재적용")
            record, created = apply(existing)
            self.db.commit()
        self.db.refresh(record)
        logger.info(f"{what} {'생성' if created else '교체'}: id={record.id}")
        return record, created

    @staticmethod
    def _apply(row, data: dict):
        for key, value in data.items():
            setattr(row, key, value)

    # ==========================================================
    # [1] 사용자
    # ==========================================================
    def get_user(self, user_id: str) -> Optional[UserModel]:
        return self.db.get(UserModel, user_id)

    def get_user_by_token(self, token: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.api_token == token).first()

    def upsert_user(self, data: UserUpsert) -> UserOut:
        values = data.model_dump(exclude_none=True)
        values["role"] = data.role.value
        user = self.db.get(UserModel, data.id) if data.id else None
        if user is None:
            user = UserModel(**values)
            self.db.add(user)
        else:
            self._apply(user, values)
            user.updated_at = datetime.utcnow()
        self._commit("user")
        self.db.refresh(user)
        return UserOut.model_validate(user)

    # ==========================================================
    # [2] 학생
    # ==========================================================
    def get_students(self) -> List[StudentWithUser]:
        rows = self.db.query(StudentModel).order_by(StudentModel.created_at.desc()).all()
        return [StudentWithUser.model_validate(r) for r in rows]

    def get_student(self, student_id: str) -> Optional[StudentWithUser]:
        row = self.db.get(StudentModel, student_id)
        return StudentWithUser.model_validate(row) if row else None

    def get_student_by_user(self, user_id: str) -> Optional[StudentOut]:
        row = self.db.query(StudentModel).filter(StudentModel.user_id == user_id).first()
        return StudentOut.model_validate(row) if row else None

    def create_student(self, data: StudentCreate) -> StudentOut:
        self._require(UserModel, data.user_id, "User")
        values = data.model_dump(exclude_none=True)
        values["grade_level"] = data.grade_level.value
        student = StudentModel(**values)
        self.db.add(student)
        self._commit("student")
        self.db.refresh(student)
        return StudentOut.model_validate(student)

    def update_student(self, student_id: str, data: StudentUpdate) -> StudentOut:
        student = self._require(StudentModel, student_id, "Student")
        values = data.model_dump(exclude_unset=True)
        if values.get("grade_level") is not None:
            values["grade_level"] = data.grade_level.value
        self._apply(student, values)
        student.updated_at = datetime.utcnow()
        self._commit("student")
        self.db.refresh(student)
        return StudentOut.model_validate(student)

    def delete_student(self, student_id: str) -> None:
        student = self._require(StudentModel, student_id, "Student")
        self.db.delete(student)
        self.db.commit()

    # ==========================================================
    # [3] 과목
    # ==========================================================
    def get_courses(self) -> List[CourseWithTeacher]:
        rows = self.db.query(CourseModel).order_by(CourseModel.created_at.desc()).all()
        return [CourseWithTeacher.model_validate(r) for r in rows]

    def get_course(self, course_id: str) -> Optional[CourseWithTeacher]:
        row = self.db.get(CourseModel, course_id)
        return CourseWithTeacher.model_validate(row) if row else None

    def create_course(self, data: CourseCreate) -> CourseOut:
        if data.teacher_id:
            self._require(UserModel, data.teacher_id, "User")
        values = data.model_dump(exclude_none=True)
        values["grade_level"] = data.grade_level.value
        course = CourseModel(**values)
        self.db.add(course)
        self._commit("course")
        self.db.refresh(course)
        return CourseOut.model_validate(course)

    def update_course(self, course_id: str, data: CourseUpdate) -> CourseOut:
        course = self._require(CourseModel, course_id, "Course")
        values = data.model_dump(exclude_unset=True)
        if values.get("teacher_id"):
            self._require(UserModel, values["teacher_id"], "User")
        if values.get("grade_level") is not None:
            values["grade_level"] = data.grade_level.value
        self._apply(course, values)
        course.updated_at = datetime.utcnow()
        self._commit("course")
        self.db.refresh(course)
        return CourseOut.model_validate(course)

    def delete_course(self, course_id: str) -> None:
        course = self._require(CourseModel, course_id, "Course")
        self.db.delete(course)
        self.db.commit()

    # ==========================================================
    # [4] 수강 신청
    # ==========================================================
    def get_enrollments(
        self, course_id: Optional[str] = None, student_id: Optional[str] = None
    ) -> List[EnrollmentWithStudentAndCourse]:
        query = self.db.query(EnrollmentModel)
        if course_id:
            query = query.filter(EnrollmentModel.course_id == course_id)
        if student_id:
            query = query.filter(EnrollmentModel.student_id == student_id)
        return [EnrollmentWithStudentAndCourse.model_validate(r) for r in query.all()]

    def enrolled_student_ids(self, course_id: str) -> List[str]:
        rows = (
            self.db.query(EnrollmentModel.student_id)
            .filter(EnrollmentModel.course_id == course_id, EnrollmentModel.status == "ACTIVE")
            .all()
        )
        return [r[0] for r in rows]

    def is_enrolled(self, student_id: str, course_id: str) -> bool:
        return (
            self.db.query(EnrollmentModel.id)
            .filter(EnrollmentModel.student_id == student_id, EnrollmentModel.course_id == course_id)
            .first()
            is not None
        )

    def create_enrollment(self, data: EnrollmentCreate) -> EnrollmentOut:
        self._require(StudentModel, data.student_id, "Student")
        self._require(CourseModel, data.course_id, "Course")
        if self.is_enrolled(data.student_id, data.course_id):
            raise ValidationError(f"student {data.student_id} is already enrolled in course {data.course_id}")
        enrollment = EnrollmentModel(**data.model_dump())
        self.db.add(enrollment)
        self._commit("enrollment")
        self.db.refresh(enrollment)
        return EnrollmentOut.model_validate(enrollment)

    def delete_enrollment(self, student_id: str, course_id: str) -> None:
        deleted = (
            self.db.query(EnrollmentModel)
            .filter(EnrollmentModel.student_id == student_id, EnrollmentModel.course_id == course_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            raise MissingReferenceError("Enrollment", f"{student_id}/{course_id}")
        self.db.commit()

    # ==========================================================
    # [5] 출결
    # ==========================================================
    def get_attendance(self, course_id: str, on_date: Optional[date] = None) -> List[AttendanceWithStudent]:
        query = self.db.query(AttendanceModel).filter(AttendanceModel.course_id == course_id)
        if on_date:
            query = query.filter(AttendanceModel.date == on_date)
        rows = query.order_by(AttendanceModel.date.desc()).all()
        return [AttendanceWithStudent.model_validate(r) for r in rows]

    def get_student_attendance(
        self, student_id: str, course_id: Optional[str] = None, since: Optional[date] = None
    ) -> List[AttendanceOut]:
        query = self.db.query(AttendanceModel).filter(AttendanceModel.student_id == student_id)
        if course_id:
            query = query.filter(AttendanceModel.course_id == course_id)
        if since:
            query = query.filter(AttendanceModel.date >= since)
        return [AttendanceOut.model_validate(r) for r in query.order_by(AttendanceModel.date.desc()).all()]

    def mark_attendance(self, data: AttendanceMark) -> Tuple[AttendanceOut, bool]:
        """학생×과목×날짜 upsert. 반환: (출결, 새로 생성됐는지)"""
        validate_status(data.status)
        self._require(StudentModel, data.student_id, "Student")
        self._require(CourseModel, data.course_id, "Course")
        if data.marked_by:
            self._require(UserModel, data.marked_by, "User")

        def lookup():
            return (
                self.db.query(AttendanceModel)
                .options(lazyload("*"))
                .filter(
                    AttendanceModel.student_id == data.student_id,
                    AttendanceModel.course_id == data.course_id,
                    AttendanceModel.date == data.date,
                )
            )

        record, created = self._upsert(lookup, lambda existing: mark_or_replace_attendance(existing, data), "attendance")
        return AttendanceOut.model_validate(record), created

    def update_attendance(self, attendance_id: str, data: AttendanceUpdate, marked_by: str) -> AttendanceOut:
        record = self._require(AttendanceModel, attendance_id, "Attendance")
        values = data.model_dump(exclude_unset=True)
        if "status" in values:
            values["status"] = validate_status(values["status"]).value
        self._apply(record, values)
        record.marked_by = marked_by
        record.marked_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(record)
        return AttendanceOut.model_validate(record)

    # ==========================================================
    # [6] 평가 항목
    # ==========================================================
    def get_assessments(self, course_id: Optional[str] = None) -> List[AssessmentOut]:
        query = self.db.query(AssessmentModel)
        if course_id:
            query = query.filter(AssessmentModel.course_id == course_id)
        rows = query.order_by(AssessmentModel.created_at.desc()).all()
        return [AssessmentOut.model_validate(r) for r in rows]

    def get_assessment(self, assessment_id: str) -> Optional[AssessmentOut]:
        row = self.db.get(AssessmentModel, assessment_id)
        return AssessmentOut.model_validate(row) if row else None

    def create_assessment(self, data: AssessmentCreate) -> AssessmentOut:
        self._require(CourseModel, data.course_id, "Course")
        values = data.model_dump()
        values["type"] = data.type.value
        assessment = AssessmentModel(**values)
        self.db.add(assessment)
        self._commit("assessment")
        self.db.refresh(assessment)
        return AssessmentOut.model_validate(assessment)

    def update_assessment(self, assessment_id: str, data: AssessmentUpdate) -> AssessmentOut:
        assessment = self._require(AssessmentModel, assessment_id, "Assessment")
        values = data.model_dump(exclude_unset=True)
        if values.get("type") is not None:
            values["type"] = data.type.value
        for key in ("max_score", "weight", "name", "type"):
            if key in values and values[key] is None:
                raise ValidationError(f"{key} cannot be null")
        self._apply(assessment, values)
        assessment.updated_at = datetime.utcnow()
        self._commit("assessment")
        self.db.refresh(assessment)
        return AssessmentOut.model_validate(assessment)

    def delete_assessment(self, assessment_id: str) -> None:
        # relationship cascade 로 해당 평가의 성적도 함께 삭제
        assessment = self._require(AssessmentModel, assessment_id, "Assessment")
        self.db.delete(assessment)
        self.db.commit()

    # ==========================================================
    # [7] 성적
    # ==========================================================
    def get_grades(
        self,
        student_id: Optional[str] = None,
        course_id: Optional[str] = None,
        assessment_id: Optional[str] = None,
    ) -> List[GradeWithStudentAndAssessment]:
        query = self.db.query(GradeModel).join(AssessmentModel, GradeModel.assessment_id == AssessmentModel.id)
        if student_id:
            query = query.filter(GradeModel.student_id == student_id)
        if course_id:
            query = query.filter(AssessmentModel.course_id == course_id)
        if assessment_id:
            query = query.filter(GradeModel.assessment_id == assessment_id)
        rows = query.order_by(GradeModel.graded_at.desc()).all()
        return [GradeWithStudentAndAssessment.model_validate(r) for r in rows]

    def create_grade(self, data: GradeCreate) -> Tuple[GradeOut, bool]:
        """학생×평가 upsert. 반환: (성적, 새로 생성됐는지)"""
        validate_score(data.score)
        self._require(StudentModel, data.student_id, "Student")
        self._require(AssessmentModel, data.assessment_id, "Assessment")
        if data.graded_by:
            self._require(UserModel, data.graded_by, "User")

        def lookup():
            return (
                self.db.query(GradeModel)
                .options(lazyload("*"))
                .filter(
                    GradeModel.student_id == data.student_id,
                    GradeModel.assessment_id == data.assessment_id,
                )
            )

        grade, created = self._upsert(lookup, lambda existing: create_or_replace_grade(existing, data), "grade")
        return GradeOut.model_validate(grade), created

    def update_grade(self, grade_id: str, data: GradeUpdate, graded_by: str) -> GradeOut:
        grade = self._require(GradeModel, grade_id, "Grade")
        values = data.model_dump(exclude_unset=True)
        if "score" in values:
            values["score"] = validate_score(values["score"])
        self._apply(grade, values)
        grade.graded_by = graded_by
        grade.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(grade)
        return GradeOut.model_validate(grade)

    def delete_grade(self, grade_id: str) -> None:
        grade = self._require(GradeModel, grade_id, "Grade")
        self.db.delete(grade)
        self.db.commit()

    # ==========================================================
    # [8] 통계
    # ==========================================================
    def get_dashboard_stats(self, window_days: int = 30, today: Optional[date] = None) -> DashboardStats:
        total_students = (
            self.db.query(func.count(StudentModel.id)).filter(StudentModel.status == "ACTIVE").scalar() or 0
        )
        active_courses = (
            self.db.query(func.count(CourseModel.id)).filter(CourseModel.is_active.is_(True)).scalar() or 0
        )

        since = (today or date.today()) - timedelta(days=window_days)
        recent = (
            self.db.query(AttendanceModel)
            .options(lazyload("*"))
            .filter(AttendanceModel.date >= since)
            .all()
        )
        avg_score = self.db.query(func.avg(GradeModel.score)).scalar()

        return DashboardStats(
            total_students=total_students,
            active_courses=active_courses,
            attendance_rate=compute_attendance_rate(recent),
            average_grade=round_half_up(avg_score) if avg_score is not None else 0.0,
        )
