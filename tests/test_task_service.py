import io
from datetime import datetime, timedelta
from itertools import count
from unittest.mock import MagicMock

import pytest

from app.backend.core.exceptions import InternalServerError, NotFoundError
from app.backend.models.task import Task, TaskStatus
from app.backend.schemas.task import AttachmentUpload, TaskFilter, TaskRequest
from app.backend.services.task_service import TaskService
from tests.fakes import JAKARTA, FakeAttachmentStore

BASE = datetime(2024, 5, 1, 8, 0, tzinfo=JAKARTA)


def _ticking_clock():
    ticks = count()
    return lambda: BASE + timedelta(seconds=next(ticks))


@pytest.fixture
def service(task_repository, store):
    return TaskService(task_repository, store, JAKARTA, clock=_ticking_clock())


def _upload(file_name: str, name_param: str = "task-1", body: bytes = b"\x89PNG") -> AttachmentUpload:
    return AttachmentUpload(
        file=io.BytesIO(body),
        file_name=file_name,
        size=len(body),
        file_name_param=name_param,
    )


def test_create_task_assigns_initiated_status_and_created_at(service, task_repository):
    resp = service.create_task(TaskRequest(name="write report", description=None))

    assert resp.status == "OK"
    assert resp.code == 200
    assert resp.data.id > 0
    assert resp.data.status == TaskStatus.INITIATED
    assert resp.data.created_at == BASE
    assert resp.data.updated_at is None

    stored = task_repository.find_one_by_id(resp.data.id)
    assert stored.status == TaskStatus.INITIATED
    assert stored.updated_at is None


def test_create_task_uses_configured_zone(task_repository, store):
    service = TaskService(task_repository, store, JAKARTA)

    resp = service.create_task(TaskRequest(name="tz"))

    assert resp.data.created_at.tzinfo == JAKARTA


def test_update_task_preserves_created_at_and_stamps_updated_at(service):
    created = service.create_task(TaskRequest(name="write report")).data

    resp = service.update_task(created.id, TaskRequest(name="write report", status=TaskStatus.DONE))

    assert resp.status == "OK"
    assert resp.data.status == 2
    assert resp.data.created_at == created.created_at
    assert resp.data.updated_at > resp.data.created_at

    fetched = service.get_task(created.id).data
    assert fetched.status == 2
    assert fetched.updated_at == resp.data.updated_at


def test_update_task_missing_id_is_not_found_and_writes_nothing():
    repo = MagicMock()
    repo.find_one_by_id.side_effect = NotFoundError("task 9 not found")
    service = TaskService(repo, FakeAttachmentStore(), JAKARTA)

    resp = service.update_task(9, TaskRequest(name="ghost"))

    assert resp.status == "NotFound"
    assert resp.code == 404
    repo.update_by_id.assert_not_called()


def test_update_task_write_failure_is_internal():
    repo = MagicMock()
    repo.find_one_by_id.return_value = Task(id=1, name="a", status=0, created_at=BASE)
    repo.update_by_id.side_effect = InternalServerError()
    service = TaskService(repo, FakeAttachmentStore(), JAKARTA)

    resp = service.update_task(1, TaskRequest(name="a"))

    assert resp.status == "UnexpectedError"
    assert resp.code == 500


def test_get_task_not_found(service):
    resp = service.get_task(12345)

    assert resp.status == "NotFound"
    assert resp.code == 404
    assert resp.data is None


def test_get_task_other_errors_do_not_leak_store_detail(caplog):
    repo = MagicMock()
    repo.find_one_by_id.side_effect = InternalServerError("connection refused to 10.0.0.5")
    service = TaskService(repo, FakeAttachmentStore(), JAKARTA)

    resp = service.get_task(1)

    assert resp.status == "UnexpectedError"
    assert resp.code == 500
    assert "10.0.0.5" not in resp.message
    assert "get task 1 failed" in caplog.text


def test_get_task_keeps_nullable_fields(service):
    task_id = service.create_task(TaskRequest(name="n")).data.id

    dumped = service.get_task(task_id).data.model_dump(by_alias=True)

    assert dumped["description"] is None
    assert dumped["attachment"] is None
    assert dumped["updatedAt"] is None


def test_list_tasks_filter_scenario(service):
    service.create_task(TaskRequest(name="write report"))
    service.create_task(TaskRequest(name="review report"))

    matched = service.list_tasks(TaskFilter(name="write report"))
    unmatched = service.list_tasks(TaskFilter(name="nope"))
    everything = service.list_tasks(TaskFilter())

    assert [t.name for t in matched.data] == ["write report"]
    assert unmatched.status == "OK"
    assert unmatched.data == []
    assert len(everything.data) == 2


def test_create_task_save_failure_is_internal():
    repo = MagicMock()
    repo.save.side_effect = InternalServerError()
    service = TaskService(repo, FakeAttachmentStore(), JAKARTA)

    resp = service.create_task(TaskRequest(name="x"))

    assert resp.status == "UnexpectedError"
    assert resp.code == 500


@pytest.mark.parametrize("file_name", ["photo.JPG", "photo.jpg", "photo.Jpg", "scan.PNG", "pic.jpeg"])
def test_upload_accepts_allowed_extensions_in_any_case(service, store, file_name):
    resp = service.upload_attachment("todo_attachment", _upload(file_name))

    assert resp.status == "OK"
    assert len(store.calls) == 1


@pytest.mark.parametrize("file_name", ["anim.gif", "anim.GIF", "noext"])
def test_upload_rejects_other_extensions_before_storage(service, store, file_name):
    resp = service.upload_attachment("todo_attachment", _upload(file_name))

    assert resp.status == "InvalidPayload"
    assert resp.code == 400
    assert store.calls == []


def test_upload_unknown_folder_never_reaches_storage(service, store):
    resp = service.upload_attachment("secrets", _upload("photo.png"))

    assert resp.status == "InvalidPayload"
    assert store.calls == []


def test_upload_requires_name_param(service, store):
    resp = service.upload_attachment("todo_attachment", _upload("photo.png", name_param=""))

    assert resp.status == "InvalidPayload"
    assert store.calls == []


def test_upload_rejects_oversized_files(task_repository, store):
    service = TaskService(task_repository, store, JAKARTA, max_upload_bytes=2)

    resp = service.upload_attachment("todo_attachment", _upload("photo.png", body=b"too big"))

    assert resp.status == "InvalidPayload"
    assert store.calls == []


def test_upload_composes_key_and_url(service, store):
    resp = service.upload_attachment("todo_attachment", _upload("holiday.JPG", name_param="task-42"))

    assert resp.data.image_url == (
        "https://storage.googleapis.com/image-wreg/wr/todo_attachment/task-42.JPG"
    )
    call = store.calls[0]
    assert call.bucket == "image-wreg"
    assert call.key == "wr/todo_attachment/task-42.JPG"
    assert call.content_type == "image/png"
    assert call.body == b"\x89PNG"


def test_upload_does_not_touch_task_rows(service, task_repository):
    task_id = service.create_task(TaskRequest(name="with image")).data.id

    service.upload_attachment("todo_attachment", _upload("a.png"))

    assert task_repository.find_one_by_id(task_id).attachment is None


def test_upload_storage_failure_is_internal(task_repository):
    store = FakeAttachmentStore(fail=True)
    service = TaskService(task_repository, store, JAKARTA)

    resp = service.upload_attachment("todo_attachment", _upload("a.png"))

    assert resp.status == "UnexpectedError"
    assert resp.code == 500
    assert len(store.calls) == 1


@pytest.mark.parametrize(
    "file_name, expected",
    [(".png", ".png"), ("photo.tar.png", ".png"), ("dir.v2/photo", ""), ("noext", ""), ("photo.", ".")],
)
def test_extension_is_taken_from_the_last_dot_of_the_base_name(file_name, expected):
    assert _upload(file_name).file_extension == expected


def test_upload_of_bare_dot_png_is_accepted(service, store):
    resp = service.upload_attachment("todo_attachment", _upload(".png"))

    assert resp.status == "OK"
    assert store.calls[0].key == "wr/todo_attachment/task-1.png"


def test_list_failure_is_reported_as_internal_error():
    repo = MagicMock()
    repo.find_many.side_effect = NotFoundError("should not leak as NotFound")
    service = TaskService(repo, FakeAttachmentStore(), JAKARTA)

    resp = service.list_tasks(TaskFilter())

    assert resp.status == "UnexpectedError"
    assert resp.code == 500
