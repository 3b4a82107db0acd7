# hostelkit/api/v1/students.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from hostelkit.api import deps
from hostelkit.api.deps import STAFF_ROLES, Actor
from hostelkit.models.base import StudentStatus
from hostelkit.schemas.student import (
    AdmissionRequest,
    AdmissionResult,
    DepartureResult,
    MoveRequest,
    StudentResponse,
)
from hostelkit.services.occupancy import OccupancyService
from hostelkit.services.student import StudentLifecycleService

router = APIRouter(prefix="/students", tags=["Students"])


@router.post("", response_model=AdmissionResult, status_code=status.HTTP_201_CREATED)
def admit_student(
    payload: AdmissionRequest,
    _: Actor = Depends(deps.require_roles(*STAFF_ROLES)),
    students: StudentLifecycleService = Depends(deps.get_student_service),
):
    return students.admit(payload, payload.hostel_id)


@router.get("", response_model=List[StudentResponse])
def list_students(
    hostel_id: str = Query(...),
    student_status: Optional[StudentStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    _: Actor = Depends(deps.require_roles(*STAFF_ROLES)),
    students: StudentLifecycleService = Depends(deps.get_student_service),
):
    return students.list_students(hostel_id, status=student_status, skip=skip, limit=limit)


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(
    student_id: str,
    _: Actor = Depends(deps.get_actor),
    students: StudentLifecycleService = Depends(deps.get_student_service),
):
    return students.get_student(student_id)


@router.post("/{student_id}/move", response_model=StudentResponse)
def move_student(
    student_id: str,
    payload: MoveRequest,
    _: Actor = Depends(deps.require_roles(*STAFF_ROLES)),
    occupancy: OccupancyService = Depends(deps.get_occupancy_service),
):
    return occupancy.move(student_id, payload.target_room_id, payload.target_bed_number)


@router.delete("/{student_id}", response_model=DepartureResult)
def depart_student(
    student_id: str,
    actor: Actor = Depends(deps.require_roles(*STAFF_ROLES)),
    students: StudentLifecycleService = Depends(deps.get_student_service),
):
    return students.depart(student_id, actor.role)
