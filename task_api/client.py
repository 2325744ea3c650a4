"""HTTP client and view state for the task API.

``TaskBoard`` mirrors what the browser UI keeps: the last fetched list, a
draft for the next task and the task being edited. The server is the only
source of truth, so every successful change is followed by a fresh list
call instead of patching ``tasks`` locally.
"""

import logging
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel

from .config import API_URL
from .schemas.task import Task, TaskUpdated

logger = logging.getLogger(__name__)


class TaskApiError(Exception):
    """A failed call; ``status_code`` is None when no response arrived."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TaskClient:
    """Thin wrapper over the task API routes."""

    def __init__(
        self,
        base_url: str = API_URL,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(timeout=timeout)

    def __enter__(self) -> "TaskClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self._http.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.HTTPError as exc:
            raise TaskApiError(str(exc)) from exc

        if response.is_error:
            message = response.reason_phrase
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                message = body["error"]
            raise TaskApiError(message, response.status_code)

        if response.status_code == httpx.codes.NO_CONTENT:
            return None
        return response.json()

    def health(self) -> dict:
        return self._request("GET", "/health")

    def list_tasks(self) -> List[Task]:
        return [Task.model_validate(item) for item in self._request("GET", "/tasks")]

    def get_task(self, task_id: int) -> Task:
        return Task.model_validate(self._request("GET", f"/tasks/{task_id}"))

    def create_task(self, title: str, description: str = "") -> Task:
        payload = {"title": title, "description": description}
        return Task.model_validate(self._request("POST", "/tasks", json=payload))

    def update_task(self, task_id: int, title: str, description: str = "") -> TaskUpdated:
        payload = {"title": title, "description": description}
        return TaskUpdated.model_validate(self._request("PUT", f"/tasks/{task_id}", json=payload))

    def delete_task(self, task_id: int) -> None:
        self._request("DELETE", f"/tasks/{task_id}")


class TaskDraft(BaseModel):
    title: str = ""
    description: str = ""


class TaskEdit(TaskDraft):
    id: int


class TaskBoard:
    """Local view state; each action reports failure through ``error``."""

    def __init__(self, client: TaskClient):
        self.client = client
        self.tasks: List[Task] = []
        self.draft = TaskDraft()
        self.editing: Optional[TaskEdit] = None
        self.error: Optional[str] = None

    def refresh(self) -> bool:
        try:
            self.tasks = self.client.list_tasks()
        except TaskApiError as exc:
            logger.error("Error fetching tasks: %s", exc)
            self.error = "Failed to fetch tasks. Please check your backend service."
            return False
        self.error = None
        return True

    def create(self) -> bool:
        if not self.draft.title.strip():
            self.error = "Task title is required."
            return False
        try:
            self.client.create_task(self.draft.title, self.draft.description)
        except TaskApiError as exc:
            logger.error("Error creating task: %s", exc)
            self.error = "Failed to create task. Please try again."
            return False
        self.draft = TaskDraft()
        return self.refresh()

    def start_editing(self, task: Task) -> None:
        self.editing = TaskEdit(id=task.id, title=task.title, description=task.description)

    def cancel_editing(self) -> None:
        self.editing = None

    def update(self) -> bool:
        if self.editing is None:
            return False
        if not self.editing.title.strip():
            self.error = "Task title is required."
            return False
        try:
            self.client.update_task(self.editing.id, self.editing.title, self.editing.description)
        except TaskApiError as exc:
            logger.error("Error updating task: %s", exc)
            self.error = "Failed to update task. Please try again."
            return False
        self.editing = None
        return self.refresh()

    def delete(self, task_id: int) -> bool:
        try:
            self.client.delete_task(task_id)
        except TaskApiError as exc:
            logger.error("Error deleting task: %s", exc)
            self.error = "Failed to delete task. Please try again."
            return False
        return self.refresh()
