from fastapi import Depends
from sqlalchemy.orm import Session

from database.db import get_db
from services.storage import DatabaseStorage


# ✅ 요청 단위 저장소 (요청마다 새 세션)
def get_storage(db: Session = Depends(get_db)) -> DatabaseStorage:
    return DatabaseStorage(db)
