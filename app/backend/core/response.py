# app/backend/core/response.py
from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.backend.core.exceptions import STATUS_OK, AppError


class Response(BaseModel):
    """Envelope returned by every endpoint. Clients should key off status/code, not message."""

    status: str
    code: int
    message: str = ""
    data: Any = None


def success_response(data: Any = None, message: str = "", code: int = 200) -> Response:
    return Response(status=STATUS_OK, code=code, message=message, data=data)


def error_response(err: AppError, message: str | None = None, data: Any = None) -> Response:
    return Response(
        status=err.status,
        code=err.code,
        message=err.message if message is None else message,
        data=data,
    )


def to_json_response(resp: Response) -> JSONResponse:
    return JSONResponse(status_code=resp.code, content=jsonable_encoder(resp, by_alias=True))
