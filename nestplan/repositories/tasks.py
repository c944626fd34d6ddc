"""Task persistence."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from nestplan.models.task import Task


class TaskRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def for_workspace(
        self, workspace_id: uuid.UUID, *, done: bool | None = None
    ) -> list[Task]:
        stmt = select(Task).where(Task.workspace_id == workspace_id)
        if done is not None:
            stmt = stmt.where(Task.done == done)
        stmt = stmt.order_by(Task.created_at.desc())  # type: ignore[attr-defined]
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, task_id: uuid.UUID, workspace_id: uuid.UUID) -> Task | None:
        stmt = select(Task).where(Task.id == task_id, Task.workspace_id == workspace_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, task: Task) -> Task:
        self.session.add(task)
        await self.session.flush()
        return task

    async def delete(self, task: Task) -> None:
        await self.session.delete(task)
        await self.session.flush()
