"""
schemas/common.py

- 전역 에러 핸들러(middlewares/error_handler.py)가 내려주는 에러 응답 스키마
- 라우터 등록 시 responses= 로 넘겨 Swagger 문서에 노출
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """에러 코드/메시지를 담는 최소 단위"""
    code: str = Field(..., description="에러 식별 코드 (예: VALIDATION_ERROR, NOT_FOUND, FORBIDDEN)")
    message: Any = Field(..., description="사람이 읽을 수 있는 에러 메시지")
    details: Optional[List[Any]] = Field(default=None, description="요청 형식 오류(422)일 때 필드별 상세")


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(..., description="응답 생성 시각 (UTC)")

    model_config = ConfigDict(extra="ignore")


# ✅ 공통 에러 응답 문서화
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "도메인 검증 실패 (VALIDATION_ERROR)"},
    401: {"model": ErrorResponse, "description": "인증 실패"},
    403: {"model": ErrorResponse, "description": "권한 없음 (FORBIDDEN)"},
    404: {"model": ErrorResponse, "description": "참조 대상 없음 (NOT_FOUND)"},
    422: {"model": ErrorResponse, "description": "요청 형식 오류 (INVALID_REQUEST)"},
}
