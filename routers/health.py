# routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.errors import StorageError
from db.session import DB_BACKEND
from routers.deps import get_store
from storage.base import ComplaintStore

router = APIRouter(tags=["health"])


@router.get("/", summary="health check")
def root():
    return {"message": "Campus complaint portal API is running"}


@router.get("/api/health", summary="storage connectivity check")
def health(store: ComplaintStore = Depends(get_store)):
    now = datetime.now(timezone.utc).isoformat()
    try:
        store.ping()
    except StorageError as e:
        return JSONResponse(
            status_code=500,
            content={
                "status": "ERROR",
                "timestamp": now,
                "database": "Connection failed",
                "error": e.message,
            },
        )
    return {"status": "OK", "timestamp": now, "database": DB_BACKEND}
