import hmac
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from database.db import get_db
from models.users import User as UserModel
from schemas.enums import UserRole
from services.errors import PermissionDeniedError
from services.storage import DatabaseStorage

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def require_user(authorization: AuthHeader = None, db: Session = Depends(get_db)) -> UserModel:
    """Authorization: Bearer <api_token> → 현재 사용자"""
    if not authorization:
        raise _unauthorized("Missing Authorization header")

    # "Bearer <token>" 파싱
    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        raise _unauthorized("Invalid Authorization header format")

    if scheme.lower() != "bearer":
        raise _unauthorized("Invalid auth scheme")

    token = token.strip()
    user = DatabaseStorage(db).get_user_by_token(token) if token else None
    # 타이밍 안전 비교
    if user is None or not hmac.compare_digest(token, user.api_token or ""):
        raise _unauthorized("Invalid token")
    return user


def require_roles(*roles: UserRole):
    """지정한 역할만 통과시키는 의존성 생성 (예: require_roles(UserRole.ADMIN, UserRole.TEACHER))"""
    allowed = {r.value for r in roles}

    def _checker(user: UserModel = Depends(require_user)) -> UserModel:
        if user.role not in allowed:
            raise PermissionDeniedError(f"role {user.role} is not allowed (requires one of: {', '.join(sorted(allowed))})")
        return user

    return _checker


# ✅ 관리자/교사 전용 (명부·성적·출결 변경)
require_staff = require_roles(UserRole.ADMIN, UserRole.TEACHER)


def ensure_can_view_student(user: UserModel, student_id: str, db: Session) -> None:
    """학생 계정은 본인 기록만 조회 가능"""
    if user.role != UserRole.STUDENT.value:
        return
    own = DatabaseStorage(db).get_student_by_user(user.id)
    if own is None or own.id != student_id:
        raise PermissionDeniedError("students may only view their own records")
