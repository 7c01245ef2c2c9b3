from pathlib import Path
from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from core.logger import get_logger
from core.models import TaskStatus, UploadAccepted
from core.tasks_store import TaskRegistry
from services.compression import compress_file
from services.storage import is_within, sanitize_filename, write_blob

router = APIRouter()
logger = get_logger(__name__)


def run_write_task(registry: TaskRegistry, task_id: str, contents: bytes, compress: bool = False):
    """The background unit: persists one uploaded part and records the outcome."""
    task = registry.get(task_id)
    if task is None or not task.destination_path:
        logger.error(f"Task {task_id} has no destination; nothing to write.")
        registry.set_status(task_id, TaskStatus.FAILED, reason="no destination path")
        return

    path = Path(task.destination_path)
    try:
        write_blob(path, contents)
        if compress:
            compress_file(path, path.with_name(path.name + ".gz"))
    except OSError as e:
        reason = e.strerror or str(e) or e.__class__.__name__
        logger.error(f"Failed to write '{path}' for task {task_id}: {reason}")
        registry.set_status(task_id, TaskStatus.FAILED, reason=reason)
        return
    except Exception as e:
        logger.exception(f"Unexpected error while writing '{path}' for task {task_id}.")
        registry.set_status(task_id, TaskStatus.FAILED, reason=str(e) or e.__class__.__name__)
        return

    registry.set_status(task_id, TaskStatus.COMPLETED)
    logger.info(f"Uploaded: {path.name} ({len(contents)} bytes, task {task_id})")


class UploadHandler:
    """
    Turns multipart uploads into registry tasks and schedules the disk writes.

    The registry and upload directory are injected so several handlers (and
    tests) can run side by side without sharing global state.
    """

    def __init__(self, registry: TaskRegistry, upload_dir, compress: bool = False):
        self.registry = registry
        self.upload_dir = Path(upload_dir)
        self.compress = compress

    def accept(self, filename: str, contents: bytes, background_tasks: BackgroundTasks) -> Optional[UploadAccepted]:
        safe_name = sanitize_filename(filename)
        if not safe_name:
            logger.warning(f"Rejected part with unusable filename {filename!r}.")
            return None

        destination = self.upload_dir / safe_name
        if not is_within(self.upload_dir, destination):
            logger.warning(f"Rejected part {filename!r}: destination escapes the upload directory.")
            return None

        task_id = self.registry.create(
            filename=safe_name,
            destination_path=str(destination),
            original_filename=filename,
        )
        background_tasks.add_task(
            run_write_task, self.registry, task_id, contents, self.compress
        )
        logger.info(f"Accepted '{safe_name}' as task {task_id}.")
        return UploadAccepted(task_id=task_id, filename=safe_name)

    async def handle(self, request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
        content_type = request.headers.get("content-type", "")
        if not content_type.lower().startswith("multipart/form-data"):
            raise HTTPException(
                status_code=400,
                detail="Expected a multipart/form-data request body.",
            )

        try:
            form = await request.form()
        except ValueError as e:
            # Starlette already turns its own MultiPartException into a 400;
            # parser errors raised by python-multipart itself come through as ValueError.
            logger.warning(f"Malformed multipart body: {e}")
            raise HTTPException(status_code=400, detail=f"Malformed multipart body: {e}")

        accepted: List[UploadAccepted] = []
        try:
            for field_name, value in form.multi_items():
                # Plain form fields carry no filename and are ignored.
                if not isinstance(value, UploadFile) or not value.filename:
                    continue
                contents = await value.read()
                logger.info(f"Received file: {field_name} -> {value.filename!r} ({len(contents)} bytes)")
                task = self.accept(value.filename, contents, background_tasks)
                if task is not None:
                    accepted.append(task)
        finally:
            await form.close()

        if not accepted:
            return JSONResponse(status_code=400, content={"error": "no file uploaded"})

        return JSONResponse(
            status_code=202,
            content=[task.model_dump(mode="json") for task in accepted],
        )


def get_upload_handler(request: Request) -> UploadHandler:
    return request.app.state.upload_handler


@router.post("/upload", status_code=202, tags=["Upload"])
async def upload_file(
    request: Request,
    background_tasks: BackgroundTasks,
    handler: UploadHandler = Depends(get_upload_handler),
):
    """
    Accepts one or more files and returns a task id per file immediately.
    The files are written to disk after the response has been sent.
    """
    return await handler.handle(request, background_tasks)
