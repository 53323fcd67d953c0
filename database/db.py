from sqlalchemy import create_engine, event           # SQLAlchemy 엔진 생성 도구
from sqlalchemy.orm import declarative_base, sessionmaker

from config.settings import settings                # ✅ 환경변수 설정 파일 불러오기

# ✅ SQLite는 스레드 체크 해제 필요 (FastAPI 워커 스레드에서 세션 사용)
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

# ✅ 환경변수에서 DB 연결 URL을 불러와 엔진 생성
engine = create_engine(settings.DATABASE_URL, echo=settings.DB_ECHO, connect_args=_connect_args)

# ✅ 세션 팩토리: DB 연결에 사용할 세션 생성기 정의
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ 모델 정의 시 상속할 Base 클래스 (Declarative 방식 사용)
Base = declarative_base()


def enable_sqlite_foreign_keys(target_engine):
    """SQLite는 기본적으로 FK(ON DELETE CASCADE 포함)를 강제하지 않으므로 연결마다 켜 준다."""
    if target_engine.dialect.name != "sqlite":
        return

    @event.listens_for(target_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)


# ==========================================================
# [공통] DB 세션 관리 (라우터에서 Depends로 사용)
# ==========================================================
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(target_engine=None):
    """모든 모델 테이블 생성 (이미 있으면 건너뜀)"""
    from models import (  # noqa: F401  모델 등록용
        assessments, attendance, courses, enrollments, grades, students, users,
    )

    Base.metadata.create_all(bind=target_engine or engine)
