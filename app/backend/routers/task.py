# app/backend/routers/task.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from app.backend.core.response import to_json_response
from app.backend.dependencies.auth import verify_basic_auth
from app.backend.dependencies.services import get_task_service
from app.backend.schemas.task import AttachmentUpload, TaskFilter, TaskRequest
from app.backend.services.task_service import TaskService

router = APIRouter(
    prefix="/todo/v2/task",
    tags=["Tasks"],
    dependencies=[Depends(verify_basic_auth)],
)


@router.get("")
def get_many_tasks(
    name: Optional[str] = Query(None),
    service: TaskService = Depends(get_task_service),
):
    # an empty ?name= means no filter
    return to_json_response(service.list_tasks(TaskFilter(name=name or None)))


@router.post("")
def create_task(
    payload: TaskRequest,
    service: TaskService = Depends(get_task_service),
):
    return to_json_response(service.create_task(payload))


@router.get("/{task_id}")
def get_one_task(
    task_id: int,
    service: TaskService = Depends(get_task_service),
):
    return to_json_response(service.get_task(task_id))


@router.put("/{task_id}")
def update_task(
    task_id: int,
    payload: TaskRequest,
    service: TaskService = Depends(get_task_service),
):
    return to_json_response(service.update_task(task_id, payload))


@router.post("/attachment/{bucket}")
def upload_attachment(
    bucket: str,
    attachment: UploadFile = File(...),
    filename: str = Form(""),
    service: TaskService = Depends(get_task_service),
):
    upload = AttachmentUpload(
        file=attachment.file,
        file_name=attachment.filename or "",
        size=attachment.size or 0,
        file_name_param=filename,
    )
    return to_json_response(service.upload_attachment(bucket, upload))
