# app/backend/main.py
import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.backend.core.exceptions import (
    STATUS_BAD_REQUEST,
    STATUS_NOT_FOUND,
    STATUS_UNAUTHORIZED,
    AppError,
    InternalServerError,
    InvalidPayloadError,
)
from app.backend.core.logging_config import setup_logging
from app.backend.core.response import Response, error_response, success_response, to_json_response
from app.backend.db.session import Engines, dispose_engines, get_engines

# 라우터
from app.backend.routers import task, user

setup_logging()
logger = logging.getLogger(__name__)

INDEX_MESSAGE = "Application is running properly"


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    dispose_engines()


app = FastAPI(
    title="Todo Task API",
    version=os.getenv("APP_VERSION", "0.1.0"),
    lifespan=lifespan,
)

# CORS
_default_origins = "http://localhost:3000,http://localhost:5173"
origins = [
    o.strip()
    for o in os.getenv("CORS_ALLOW_ORIGINS", _default_origins).split(",")
    if o.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["POST", "GET", "PUT", "DELETE"],
    allow_headers=["Origin", "Accept", "Content-Type", "X-Requested-With", "Authorization"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return to_json_response(error_response(InvalidPayloadError()))
    first = errors[0]
    if first.get("type") == "json_invalid":
        resp = error_response(InvalidPayloadError(first.get("msg", "invalid json")))
        resp.code = 422
        return to_json_response(resp)
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "body"
    message = f"invalid '{field}' with value '{first.get('input', '')}'"
    return to_json_response(error_response(InvalidPayloadError(message)))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    tags = {401: STATUS_UNAUTHORIZED, 404: STATUS_NOT_FOUND}
    resp = Response(status=tags.get(exc.status_code, STATUS_BAD_REQUEST), code=exc.status_code, message=str(exc.detail))
    out = to_json_response(resp)
    for key, value in (exc.headers or {}).items():
        out.headers[key] = value
    return out


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return to_json_response(error_response(exc))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return to_json_response(error_response(InternalServerError()))


# 라우터 등록
app.include_router(task.router)
app.include_router(user.user_router)


@app.get("/todo")
def index():
    return to_json_response(success_response(message=INDEX_MESSAGE))


@app.get("/health")
def health_app():
    return {"ok": True}


@app.get("/health/db")
def health_db(engines: Engines = Depends(get_engines)):
    try:
        with engines.read.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"ok": True}
    except Exception:
        logger.exception("db health check failed")
        return to_json_response(error_response(InternalServerError("Database connection failed")))
