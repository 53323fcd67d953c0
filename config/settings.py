"""
config/settings.py

- .env 및 환경변수를 읽어 애플리케이션 전역 설정으로 제공합니다.
- pydantic v2 / pydantic-settings v2 사용.
- 성적 등급 경계(GRADE_BOUNDARIES)는 서버 기동 시점(main.py startup)에 검증합니다.
  (내림차순이 아니면 ConfigError → 서버 기동 실패)
"""

import json
from typing import Dict, List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # =========================
    # 앱/런타임
    # =========================
    ENV: Literal["dev", "stage", "prod"] = "dev"
    APP_TITLE: str = "Academic Records API"
    APP_DESCRIPTION: str = "학생 명부 · 과목 · 출결 · 성적 관리 백엔드 API"
    APP_VERSION: str = "1.0.0"

    # =========================
    # CORS
    # =========================
    # 콤마(,)로 구분된 문자열 → List[str] 로 파싱
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _split_origins(cls, v):
        if isinstance(v, str):
            # "a,b , c" → ["a","b","c"]
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    # =========================
    # Database
    # =========================
    # 예: postgresql+psycopg://user:pw@host:5432/records
    DATABASE_URL: str = "sqlite:///./records.db"
    DB_ECHO: bool = False

    # =========================
    # 성적 / 출결 정책
    # =========================
    # 등급 → 최소 백분율(포함). F는 암묵적 하한이라 넣지 않음
    GRADE_BOUNDARIES: Dict[str, float] = {"A": 90, "B": 80, "C": 70, "D": 60}
    FALLBACK_GRADE: str = "F"
    ATTENDANCE_WINDOW_DAYS: int = 30       # 대시보드 출석률 집계 기간(일)
    ATTENDANCE_REQUIRED: float = 80.0      # 정상 이수 최소 출석률(%)

    @field_validator("GRADE_BOUNDARIES", mode="before")
    @classmethod
    def _parse_boundaries(cls, v):
        # '{"A": 90, ...}' 또는 "A=90,B=80" 둘 다 허용
        if isinstance(v, str):
            text = v.strip()
            if text.startswith("{"):
                return json.loads(text)
            pairs = [p.split("=", 1) for p in text.split(",") if p.strip()]
            return {k.strip(): float(val) for k, val in pairs}
        return v

    # =========================
    # Logging / Misc
    # =========================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # =========================
    # BaseSettings Config
    # =========================
    model_config = SettingsConfigDict(
        env_file=".env",               # .env에서 값 로드
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",                # 정의되지 않은 키는 무시
    )


# ✅ settings 객체를 통해 어디서든 접근 가능
settings = Settings()
