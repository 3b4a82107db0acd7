# hostelkit/services/student/student_lifecycle_service.py
"""
Student lifecycle: admission and departure.

Admission writes an account, a student, a bed assignment and an invoice,
each committed on its own. When a step fails, the steps already done are
undone in reverse order before the error is surfaced.
"""
from __future__ import annotations

from datetime import date
from typing import Callable, List, Optional, Set, Tuple

from sqlalchemy.exc import IntegrityError

from hostelkit.config.settings import settings
from hostelkit.core.exceptions import (
    AuthorizationError,
    BaseAppException,
    HostelNotFoundError,
    PartialAdmissionFailure,
    StudentNotFoundError,
    UsernameUnavailableError,
)
from hostelkit.core.logging import get_logger
from hostelkit.models.base import StudentStatus, UserRole
from hostelkit.models.core import Student, User
from hostelkit.repositories.core import HostelRepository, StudentRepository, UserRepository
from hostelkit.schemas.student import (
    AdmissionRequest,
    AdmissionResult,
    DepartureResult,
    StudentResponse,
)
from hostelkit.services.billing import BillingCycleService
from hostelkit.services.common.security import (
    base_username,
    derive_username,
    generate_password,
    hash_password,
)
from hostelkit.services.common.unit_of_work import SessionFactory, UnitOfWork
from hostelkit.services.occupancy import OccupancyService

logger = get_logger(__name__)

HARD_DELETE_ROLES = (UserRole.ADMIN, UserRole.OWNER)

_PROFILE_FIELDS = (
    "full_name",
    "father_name",
    "cnic",
    "date_of_birth",
    "gender",
    "phone",
    "email",
    "permanent_address",
    "emergency_contact_name",
    "emergency_contact_relation",
    "emergency_contact_phone",
    "institution",
    "course",
    "monthly_fee",
    "security_deposit",
)


class StudentLifecycleService:
    def __init__(
        self,
        session_factory: SessionFactory,
        occupancy: OccupancyService,
        billing: BillingCycleService,
    ) -> None:
        self.session_factory = session_factory
        self.occupancy = occupancy
        self.billing = billing

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_student(self, student_id: str) -> Student:
        with UnitOfWork(self.session_factory) as uow:
            student = uow.get_repo(StudentRepository).get(student_id)
            if student is None:
                raise StudentNotFoundError(student_id)
            return student

    def list_students(
        self,
        hostel_id: str,
        status: Optional[StudentStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Student]:
        with UnitOfWork(self.session_factory) as uow:
            return uow.get_repo(StudentRepository).list_for_hostel(
                hostel_id, status=status, skip=skip, limit=limit
            )

    # ------------------------------------------------------------------ #
    # Admission
    # ------------------------------------------------------------------ #

    def admit(self, data: AdmissionRequest, hostel_id: str) -> AdmissionResult:
        """
        Admit a student into a bed.

        Steps: account, student record, bed assignment, admission invoice.
        Domain errors surface unchanged after compensation; anything else
        is wrapped in PartialAdmissionFailure naming the failed step.
        """
        with UnitOfWork(self.session_factory) as uow:
            hostel = uow.get_repo(HostelRepository).get(hostel_id)
            if hostel is None or not hostel.is_active:
                raise HostelNotFoundError(hostel_id)

        # fail before writing anything when the bed cannot be had
        self.occupancy.check_availability(hostel_id, data.room_id, data.bed_number)

        password = generate_password()
        undo: List[Tuple[str, Callable[[], object]]] = []
        step = "account"
        try:
            user = self._create_account(data, hostel_id, password)
            undo.append(("delete account", lambda: self._delete_user(user.id)))

            step = "student"
            student = self._create_student(data, hostel_id, user.id)
            undo.append(("delete student", lambda: self._delete_student(student.id)))

            step = "bed assignment"
            self.occupancy.assign(student.id, data.room_id, data.bed_number)
            undo.append(("release bed", lambda: self.occupancy.release(student.id)))

            step = "initial invoice"
            invoice = self.billing.create_admission_invoice(student)
        except Exception as exc:
            logger.warning(
                "Admission failed, compensating",
                extra={"failed_step": step, "hostel_id": hostel_id, "room_id": data.room_id},
            )
            self._compensate(undo)
            if isinstance(exc, BaseAppException):
                raise
            raise PartialAdmissionFailure(exc, step) from exc

        student = self.get_student(student.id)
        logger.info(
            "Student admitted",
            extra={
                "student_id": student.id,
                "user_id": user.id,
                "room_id": student.room_id,
                "bed_number": student.bed_number,
                "receipt_number": invoice.receipt_number,
            },
        )
        return AdmissionResult(
            student=StudentResponse.model_validate(student),
            username=user.username,
            password=password,
            invoice_receipt_number=invoice.receipt_number,
        )

    def _create_account(self, data: AdmissionRequest, hostel_id: str, password: str) -> User:
        hashed = hash_password(password)
        tried: Set[str] = set()
        for _ in range(settings.USERNAME_MAX_ATTEMPTS):
            with UnitOfWork(self.session_factory) as uow:
                users = uow.get_repo(UserRepository)
                username = derive_username(
                    data.full_name,
                    data.cnic,
                    lambda candidate: candidate in tried or users.username_taken(candidate),
                )
            tried.add(username)
            try:
                with UnitOfWork(self.session_factory) as uow:
                    user = uow.get_repo(UserRepository).create(
                        {
                            "username": username,
                            "email": data.email,
                            "phone": data.phone,
                            "full_name": data.full_name,
                            "role": UserRole.STUDENT,
                            "hashed_password": hashed,
                            "hostel_id": hostel_id,
                        }
                    )
            except IntegrityError:
                # taken between the check and the insert
                continue
            return user
        raise UsernameUnavailableError(base_username(data.full_name, data.cnic), settings.USERNAME_MAX_ATTEMPTS)

    def _create_student(self, data: AdmissionRequest, hostel_id: str, user_id: str) -> Student:
        values = {field: getattr(data, field) for field in _PROFILE_FIELDS}
        values.update(
            user_id=user_id,
            hostel_id=hostel_id,
            join_date=data.join_date or date.today(),
            status=StudentStatus.ACTIVE,
        )
        with UnitOfWork(self.session_factory) as uow:
            return uow.get_repo(StudentRepository).create(values)

    def _delete_user(self, user_id: str) -> None:
        with UnitOfWork(self.session_factory) as uow:
            users = uow.get_repo(UserRepository)
            user = users.get(user_id)
            if user is not None:
                users.delete(user)

    def _delete_student(self, student_id: str) -> None:
        with UnitOfWork(self.session_factory) as uow:
            students = uow.get_repo(StudentRepository)
            student = students.get(student_id)
            if student is not None:
                students.delete(student)

    @staticmethod
    def _compensate(undo: List[Tuple[str, Callable[[], object]]]) -> None:
        for action, step in reversed(undo):
            try:
                step()
            except Exception:
                logger.exception(f"Admission compensation failed: {action}")

    # ------------------------------------------------------------------ #
    # Departure
    # ------------------------------------------------------------------ #

    def depart(self, student_id: str, by_role: UserRole) -> DepartureResult:
        """
        Remove a student from the hostel.

        Managers perform a soft departure (status LEFT, record kept);
        admins and owners delete the student and its account. The bed is
        released first in both cases, and a repeated soft departure is a
        no-op.
        """
        if by_role not in HARD_DELETE_ROLES and by_role != UserRole.MANAGER:
            raise AuthorizationError("Only managers, owners and admins can remove students", "MANAGER")

        student = self.get_student(student_id)
        self.occupancy.release(student_id)

        if by_role in HARD_DELETE_ROLES:
            with UnitOfWork(self.session_factory) as uow:
                students = uow.get_repo(StudentRepository)
                users = uow.get_repo(UserRepository)
                record = students.get(student_id)
                if record is None:
                    raise StudentNotFoundError(student_id)
                user = users.get(record.user_id)
                students.delete(record)
                if user is not None:
                    users.delete(user)
            logger.info(
                "Student deleted",
                extra={"student_id": student_id, "user_id": student.user_id, "by_role": by_role.value},
            )
            return DepartureResult(student_id=student_id, deleted=True)

        if student.status != StudentStatus.ACTIVE:
            return DepartureResult(student_id=student_id, deleted=False, status=student.status)

        with UnitOfWork(self.session_factory) as uow:
            record = uow.get_repo(StudentRepository).get(student_id)
            record.status = StudentStatus.LEFT
            record.leave_date = date.today()
            user = uow.get_repo(UserRepository).get(record.user_id)
            if user is not None:
                user.is_active = False
        logger.info("Student departed", extra={"student_id": student_id, "by_role": by_role.value})

        return DepartureResult(student_id=student_id, deleted=False, status=StudentStatus.LEFT)
