from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class TaskStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PROCESSING


class UploadTask(BaseModel):
    """
    Snapshot of a single upload. Instances are frozen: the registry swaps in a
    new snapshot on every status change so readers never see a partial update.
    """
    model_config = ConfigDict(frozen=True)

    task_id: str
    filename: Optional[str] = None
    original_filename: Optional[str] = None
    destination_path: Optional[str] = None
    status: TaskStatus = TaskStatus.PROCESSING
    reason: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UploadAccepted(BaseModel):
    task_id: str
    status: TaskStatus = TaskStatus.PROCESSING
    filename: str


class TaskStatusResponse(BaseModel):
    task_id: str
    status: TaskStatus
    filename: Optional[str] = None
    original_filename: Optional[str] = None
    reason: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_task(cls, task: UploadTask) -> "TaskStatusResponse":
        return cls(
            task_id=task.task_id,
            status=task.status,
            filename=task.filename,
            original_filename=task.original_filename,
            reason=task.reason,
            created_at=task.created_at,
        )
