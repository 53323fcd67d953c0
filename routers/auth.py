from fastapi import APIRouter, Depends

from dependencies.security import require_roles, require_user
from dependencies.storage import get_storage
from models.users import User as UserModel
from schemas.enums import UserRole
from schemas.users import UserOut, UserUpsert
from services.storage import DatabaseStorage

router = APIRouter(prefix="/auth", tags=["인증"])


# ✅ [READ] 현재 로그인 사용자
@router.get("/user")
def get_current_user(user: UserModel = Depends(require_user)):
    return {"success": True, "data": UserOut.model_validate(user)}


# ✅ [UPSERT] 사용자 등록/갱신 (관리자 전용)
@router.put("/users")
def upsert_user(
    data: UserUpsert,
    _: UserModel = Depends(require_roles(UserRole.ADMIN)),
    storage: DatabaseStorage = Depends(get_storage),
):
    user = storage.upsert_user(data)
    return {"success": True, "data": user, "message": "User saved successfully"}
