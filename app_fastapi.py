# app_fastapi.py
# -*- coding: utf-8 -*-

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import CORS_ORIGINS
from core.errors import PortalError
from core.logging import logger
from db.seed import init_db
from db.session import engine, DB_BACKEND
from routers import admin_user, complaint, health, reference, stats


# ============================================================
# startup: create tables + default categories / locations
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(engine)
    logger.info(f"Campus complaint portal started (database: {DB_BACKEND})")
    yield
    engine.dispose()
    logger.info("Campus complaint portal stopped")


# ============================================================
# FastAPI app (Swagger description included)
# ============================================================

app = FastAPI(
    title="Campus Complaint Portal API",
    description="""
Backend for the campus complaint portal.

- Students submit complaints (optional name / email / location, optional images).
- Anyone can browse complaints, **support** (upvote) them and leave comments.
- Admins change status (`pending` / `resolved`), delete complaints and manage
  the category / location lists.
- `/api/stats` gives counts by status, category and location.
""",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.debug(f"{request.method} {request.url.path}")
    return await call_next(request)


# ============================================================
# error -> HTTP status mapping
#   ValidationError 400 / NotFound 404 / ConflictError 409 / StorageError 500
# ============================================================

@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})


# ============================================================
# routers
# ============================================================

app.include_router(health.router)
app.include_router(admin_user.router)
app.include_router(complaint.router)
app.include_router(reference.category_router)
app.include_router(reference.location_router)
app.include_router(stats.router)


# ============================================================
# uvicorn entry point
# ============================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app_fastapi:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
