from pydantic import BaseModel


# ✅ 대시보드 요약 통계
class DashboardStats(BaseModel):
    total_students: int                      # 재학(ACTIVE) 학생 수
    active_courses: int                      # 개설 과목 수
    attendance_rate: float                   # 최근 N일 출석률 (%)
    average_grade: float                     # 전체 점수 평균
