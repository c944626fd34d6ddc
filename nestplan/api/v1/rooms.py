"""Room CRUD, scoped to the caller's workspace."""

import uuid

from fastapi import APIRouter, HTTPException, status

from nestplan.api.deps import Auth, Session
from nestplan.models.room import Room, RoomCreate, RoomRead, RoomUpdate
from nestplan.repositories.rooms import RoomRepository

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.post("", response_model=RoomRead, status_code=status.HTTP_201_CREATED)
async def create_room(body: RoomCreate, auth: Auth, session: Session) -> RoomRead:
    room = await RoomRepository(session).add(Room(workspace_id=auth.workspace_id, name=body.name))
    await session.commit()
    await session.refresh(room)
    return RoomRead.model_validate(room)


@router.get("", response_model=list[RoomRead])
async def list_rooms(auth: Auth, session: Session) -> list[RoomRead]:
    rooms = await RoomRepository(session).for_workspace(auth.workspace_id)
    return [RoomRead.model_validate(r) for r in rooms]


@router.patch("/{room_id}", response_model=RoomRead)
async def update_room(
    room_id: uuid.UUID,
    body: RoomUpdate,
    auth: Auth,
    session: Session,
) -> RoomRead:
    room = await _get_or_404(RoomRepository(session), room_id, auth.workspace_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(room, field, value)

    room.touch()
    session.add(room)
    await session.commit()
    await session.refresh(room)
    return RoomRead.model_validate(room)


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(room_id: uuid.UUID, auth: Auth, session: Session) -> None:
    """Removes the room's budget and savings ledger; its items become unassigned."""
    repo = RoomRepository(session)
    room = await _get_or_404(repo, room_id, auth.workspace_id)
    await repo.delete(room)
    await session.commit()


async def _get_or_404(repo: RoomRepository, room_id: uuid.UUID, workspace_id: uuid.UUID) -> Room:
    room = await repo.get(room_id, workspace_id)
    if room is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room
