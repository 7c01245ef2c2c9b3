import threading
import uuid
from typing import Dict, List, Optional
from core.config import REGISTRY_SHARDS
from core.logger import get_logger
from core.models import TaskStatus, UploadTask

logger = get_logger(__name__)


class _Shard:
    __slots__ = ("lock", "tasks")

    def __init__(self):
        self.lock = threading.Lock()
        self.tasks: Dict[str, UploadTask] = {}


class TaskRegistry:
    """
    Thread-safe mapping of task id -> UploadTask.

    The map is split into lock-striped shards keyed by the task id, so
    background writers updating different tasks rarely wait on each other.
    Entries are never removed for the lifetime of the process.

    Example structure of a stored entry:
    {
      "task_id": "3f0c...-uuid4",
      "status": "processing" | "completed" | "failed",
      "filename": "report.pdf",
      "reason": None | "error message"
    }
    """

    def __init__(self, shards: int = REGISTRY_SHARDS):
        if shards < 1:
            raise ValueError("TaskRegistry needs at least one shard")
        self._shards: List[_Shard] = [_Shard() for _ in range(shards)]

    def _shard_for(self, task_id: str) -> _Shard:
        return self._shards[hash(task_id) % len(self._shards)]

    def create(
        self,
        filename: Optional[str] = None,
        destination_path: Optional[str] = None,
        original_filename: Optional[str] = None,
    ) -> str:
        """Registers a new task in the 'processing' state and returns its id."""
        while True:
            task_id = str(uuid.uuid4())
            shard = self._shard_for(task_id)
            with shard.lock:
                # A uuid4 collision is practically impossible, but never overwrite an entry.
                if task_id in shard.tasks:
                    continue
                shard.tasks[task_id] = UploadTask(
                    task_id=task_id,
                    filename=filename,
                    original_filename=original_filename,
                    destination_path=destination_path,
                )
            return task_id

    def set_status(self, task_id: str, status: TaskStatus, reason: Optional[str] = None) -> bool:
        """
        Moves a task to a new status. Returns False (without raising) when the
        id is unknown or the task has already reached a terminal status.
        """
        status = TaskStatus(status)
        if status is TaskStatus.FAILED and not reason:
            reason = "unknown error"
        if status is not TaskStatus.FAILED:
            reason = None

        shard = self._shard_for(task_id)
        with shard.lock:
            task = shard.tasks.get(task_id)
            if task is None:
                logger.warning(f"Status update for unknown task {task_id} ignored.")
                return False
            if task.status.is_terminal:
                logger.warning(
                    f"Task {task_id} is already '{task.status.value}'; ignoring update to '{status.value}'."
                )
                return False
            shard.tasks[task_id] = task.model_copy(update={"status": status, "reason": reason})
        return True

    def get(self, task_id: str) -> Optional[UploadTask]:
        shard = self._shard_for(task_id)
        with shard.lock:
            return shard.tasks.get(task_id)

    def get_status(self, task_id: str) -> Optional[TaskStatus]:
        """Returns the current status, or None when the id was never issued."""
        task = self.get(task_id)
        return task.status if task else None

    def __contains__(self, task_id: str) -> bool:
        return self.get(task_id) is not None

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.tasks)
        return total


# Process-wide registry used by the default application instance.
upload_tasks = TaskRegistry()
