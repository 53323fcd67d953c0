import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from database.db import init_db
from schemas.common import ERROR_RESPONSES
from services.grade_aggregator import validate_boundaries

# ✅ 로그 레벨은 설정값(LOG_LEVEL)으로
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# HTTP 라이브러리 디버그 로그 비활성화
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# ✅ 미들웨어 임포트
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ 라우터 임포트
from routers import (
    assessments, attendance, auth, courses, dashboard,
    enrollments, grades, students,
)

# ✅ 등급 경계 설정 검증 (내림차순이 아니면 ConfigError로 기동 중단)
validate_boundaries(settings.GRADE_BOUNDARIES, settings.FALLBACK_GRADE)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

# ✅ CORS 설정 (프론트엔드 연동)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ 요청 지연 측정 미들웨어 (응답 헤더 X-Latency-Ms 추가)
app.add_middleware(TimingMiddleware)

# ✅ 전역 에러 핸들러 등록 (일관된 JSON 에러 포맷)
add_error_handlers(app)

# ✅ /v1 프리픽스 라우터 등록
app.include_router(auth.router,        prefix="/v1", responses=ERROR_RESPONSES)
app.include_router(dashboard.router,   prefix="/v1", responses=ERROR_RESPONSES)
app.include_router(students.router,    prefix="/v1", responses=ERROR_RESPONSES)
app.include_router(courses.router,     prefix="/v1", responses=ERROR_RESPONSES)
app.include_router(enrollments.router, prefix="/v1", responses=ERROR_RESPONSES)
app.include_router(attendance.router,  prefix="/v1", responses=ERROR_RESPONSES)
app.include_router(assessments.router, prefix="/v1", responses=ERROR_RESPONSES)
app.include_router(grades.router,      prefix="/v1", responses=ERROR_RESPONSES)


@app.on_event("startup")
def _create_tables():
    init_db()
    logger.info(f"DB 초기화 완료 (env={settings.ENV})")


# ✅ 헬스체크 엔드포인트
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running"}


# ✅ 루트 엔드포인트
@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - {settings.APP_DESCRIPTION}"}
