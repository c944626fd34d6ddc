"""Task CRUD and completion toggling."""

import uuid

from fastapi import APIRouter, HTTPException, Query, status

from nestplan.api.deps import Auth, Session
from nestplan.models.task import Task, TaskCreate, TaskRead, TaskUpdate
from nestplan.repositories.rooms import CategoryRepository
from nestplan.repositories.tasks import TaskRepository

router = APIRouter(prefix="/tasks", tags=["tasks"])

# Columns that cannot be cleared with an explicit null
_REQUIRED = ("title", "assigned_to", "priority", "done")


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskCreate, auth: Auth, session: Session) -> TaskRead:
    await _check_category(session, body.category_id, auth.workspace_id)
    task = await TaskRepository(session).add(Task(workspace_id=auth.workspace_id, **body.model_dump()))
    await session.commit()
    await session.refresh(task)
    return TaskRead.model_validate(task)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    auth: Auth,
    session: Session,
    done: bool | None = Query(default=None),
) -> list[TaskRead]:
    tasks = await TaskRepository(session).for_workspace(auth.workspace_id, done=done)
    return [TaskRead.model_validate(t) for t in tasks]


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: uuid.UUID,
    body: TaskUpdate,
    auth: Auth,
    session: Session,
) -> TaskRead:
    task = await _get_or_404(TaskRepository(session), task_id, auth.workspace_id)
    update_data = body.model_dump(exclude_unset=True)
    await _check_category(session, update_data.get("category_id"), auth.workspace_id)
    for field, value in update_data.items():
        if value is None and field in _REQUIRED:
            continue
        setattr(task, field, value)

    task.touch()
    session.add(task)
    await session.commit()
    await session.refresh(task)
    return TaskRead.model_validate(task)


@router.post("/{task_id}/toggle", response_model=TaskRead)
async def toggle_task(task_id: uuid.UUID, auth: Auth, session: Session) -> TaskRead:
    """Flip the task between done and open."""
    task = await _get_or_404(TaskRepository(session), task_id, auth.workspace_id)
    task.done = not task.done
    task.touch()
    session.add(task)
    await session.commit()
    await session.refresh(task)
    return TaskRead.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: uuid.UUID, auth: Auth, session: Session) -> None:
    tasks = TaskRepository(session)
    task = await _get_or_404(tasks, task_id, auth.workspace_id)
    await tasks.delete(task)
    await session.commit()


async def _check_category(session, category_id: uuid.UUID | None, workspace_id: uuid.UUID) -> None:
    if category_id is None:
        return
    if await CategoryRepository(session).get(category_id, workspace_id) is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown category: {category_id}",
        )


async def _get_or_404(tasks: TaskRepository, task_id: uuid.UUID, workspace_id: uuid.UUID) -> Task:
    task = await tasks.get(task_id, workspace_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task
