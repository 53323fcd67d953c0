from fastapi import APIRouter, Depends

from config.settings import settings
from dependencies.security import require_staff
from dependencies.storage import get_storage
from services.storage import DatabaseStorage

router = APIRouter(prefix="/dashboard", tags=["대시보드"])


# ✅ [STATS] 재학생 수 / 개설 과목 수 / 최근 N일 출석률 / 전체 평균 점수
@router.get("/stats", dependencies=[Depends(require_staff)])
def get_dashboard_stats(storage: DatabaseStorage = Depends(get_storage)):
    stats = storage.get_dashboard_stats(window_days=settings.ATTENDANCE_WINDOW_DAYS)
    return {"success": True, "data": stats}
