# hostelkit/api/v1/rooms.py
from typing import List

from fastapi import APIRouter, Depends, Query, status

from hostelkit.api import deps
from hostelkit.api.deps import STAFF_ROLES, Actor
from hostelkit.models.base import UserRole
from hostelkit.schemas.room import RoomCreate, RoomResponse, RoomUpdate
from hostelkit.services.room import RoomService

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    _: Actor = Depends(deps.require_roles(UserRole.ADMIN, UserRole.OWNER)),
    rooms: RoomService = Depends(deps.get_room_service),
):
    return rooms.create_room(payload)


@router.get("", response_model=List[RoomResponse])
def list_rooms(
    hostel_id: str = Query(...),
    only_available: bool = Query(False),
    _: Actor = Depends(deps.get_actor),
    rooms: RoomService = Depends(deps.get_room_service),
):
    return rooms.list_rooms(hostel_id, only_available=only_available)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: str,
    _: Actor = Depends(deps.get_actor),
    rooms: RoomService = Depends(deps.get_room_service),
):
    return rooms.get_room(room_id)


@router.patch("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: str,
    payload: RoomUpdate,
    _: Actor = Depends(deps.require_roles(*STAFF_ROLES)),
    rooms: RoomService = Depends(deps.get_room_service),
):
    return rooms.update_room(room_id, payload)


@router.delete("/{room_id}", response_model=RoomResponse)
def deactivate_room(
    room_id: str,
    _: Actor = Depends(deps.require_roles(UserRole.ADMIN, UserRole.OWNER)),
    rooms: RoomService = Depends(deps.get_room_service),
):
    return rooms.deactivate_room(room_id)


@router.post("/{room_id}/reconcile", response_model=RoomResponse)
def reconcile_room(
    room_id: str,
    _: Actor = Depends(deps.require_roles(*STAFF_ROLES)),
    rooms: RoomService = Depends(deps.get_room_service),
):
    return rooms.reconcile_room(room_id)
