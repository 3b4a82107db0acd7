from hostelkit.schemas.student.student import (
    AdmissionRequest,
    AdmissionResult,
    DepartureResult,
    MoveRequest,
    StudentResponse,
)

__all__ = [
    "AdmissionRequest",
    "MoveRequest",
    "StudentResponse",
    "AdmissionResult",
    "DepartureResult",
]
