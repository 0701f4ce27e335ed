import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from hrtests.exceptions import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
def health(request: Request):
    state = request.app.state
    try:
        state.store.ping()
        database = "ok"
    except StoreError as e:
        logger.warning(f"Проверка базы данных не прошла: {e}")
        database = "unavailable"
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - state.started_at, 3),
        "database": database,
    }
