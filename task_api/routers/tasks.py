import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Response, status
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Task as TaskModel
from ..schemas.task import Task as TaskSchema, TaskCreate, TaskUpdate, TaskUpdated

logger = logging.getLogger(__name__)

router = APIRouter()

TASK_NOT_FOUND = "Task not found"

# Ids outside the signed 64-bit range cannot be bound by the drivers.
TaskId = Path(ge=-(2**63), le=2**63 - 1)


def _store_error(message: str) -> HTTPException:
    # The underlying error is logged by the caller; clients only see message.
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.get("/tasks", response_model=List[TaskSchema])
def get_tasks(db: Session = Depends(get_db)):
    """Get all tasks in insertion order."""
    try:
        return db.scalars(select(TaskModel).order_by(TaskModel.id)).all()
    except SQLAlchemyError:
        logger.exception("Error fetching tasks")
        raise _store_error("Failed to fetch tasks")


@router.get("/tasks/{task_id}", response_model=TaskSchema)
def get_task(task_id: int = TaskId, db: Session = Depends(get_db)):
    """Get a specific task by ID."""
    try:
        task = db.get(TaskModel, task_id)
    except SQLAlchemyError:
        logger.exception("Error fetching task %s", task_id)
        raise _store_error("Failed to fetch task")

    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TASK_NOT_FOUND)
    return task


@router.post("/tasks", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
def create_task(task: Optional[TaskCreate] = Body(None), db: Session = Depends(get_db)):
    """Create a new task; the store assigns ``id`` and ``created_at``."""
    if task is None or not task.title or not task.title.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")

    db_task = TaskModel(title=task.title, description=task.description or "")
    try:
        db.add(db_task)
        db.commit()
        db.refresh(db_task)
    except SQLAlchemyError:
        logger.exception("Error creating task")
        raise _store_error("Failed to create task")

    logger.info("Created task %s", db_task.id)
    return db_task


@router.put("/tasks/{task_id}", response_model=TaskUpdated)
def update_task(task_update: TaskUpdate, task_id: int = TaskId, db: Session = Depends(get_db)):
    """Replace the title and description of a task.

    Existence is decided by the affected-row count of the UPDATE itself.
    The title is not checked for blankness here, unlike on create.
    """
    description = task_update.description or ""
    statement = (
        update(TaskModel)
        .where(TaskModel.id == task_id)
        .values(title=task_update.title, description=description)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.execute(statement)
        db.commit()
    except SQLAlchemyError:
        logger.exception("Error updating task %s", task_id)
        raise _store_error("Failed to update task")

    if result.rowcount == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TASK_NOT_FOUND)
    return TaskUpdated(id=task_id, title=task_update.title, description=description)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int = TaskId, db: Session = Depends(get_db)):
    """Delete a specific task."""
    statement = (
        delete(TaskModel)
        .where(TaskModel.id == task_id)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.execute(statement)
        db.commit()
    except SQLAlchemyError:
        logger.exception("Error deleting task %s", task_id)
        raise _store_error("Failed to delete task")

    if result.rowcount == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TASK_NOT_FOUND)

    logger.info("Deleted task %s", task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
