from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from core.models import TaskStatusResponse
from core.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

@router.get("/status/{task_id}", tags=["Status"])
async def get_task_status(task_id: str, request: Request):
    """
    Reports whether the upload behind `task_id` is still being written,
    has been stored, or failed (with the reason).
    """
    registry = request.app.state.upload_handler.registry
    task = registry.get(task_id)

    if task is None:
        return JSONResponse(
            status_code=404,
            content={
                "status": "not_found",
                "detail": f"Task with id '{task_id}' not found. Please check the id for typos."
            }
        )

    return TaskStatusResponse.from_task(task).model_dump(mode="json")
