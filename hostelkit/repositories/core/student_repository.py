# hostelkit/repositories/core/student_repository.py
"""
Student repository.
"""

from typing import List, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.orm import Session

from hostelkit.models.base import StudentStatus
from hostelkit.models.core import Student
from hostelkit.repositories.base import BaseRepository


class StudentRepository(BaseRepository[Student]):
    """Repository for Student entity."""

    def __init__(self, session: Session):
        super().__init__(Student, session)

    def list_active(self, hostel_id: str) -> List[Student]:
        stmt = (
            select(Student)
            .where(and_(Student.hostel_id == hostel_id, Student.status == StudentStatus.ACTIVE))
            .order_by(Student.full_name)
        )
        return list(self.session.execute(stmt).scalars().all())

    def list_for_hostel(
        self,
        hostel_id: str,
        *,
        status: Optional[StudentStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Student]:
        stmt = select(Student).where(Student.hostel_id == hostel_id)
        if status is not None:
            stmt = stmt.where(Student.status == status)
        stmt = stmt.order_by(Student.full_name).offset(skip).limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def count_active(self, hostel_id: str) -> int:
        stmt = select(func.count(Student.id)).where(
            and_(Student.hostel_id == hostel_id, Student.status == StudentStatus.ACTIVE)
        )
        return self.session.execute(stmt).scalar() or 0

    def clear_placement(self, student_id: str, room_id: str) -> int:
        """
        Clear room/bed only while the student still points at `room_id`.
        Returns 0 when another caller already released the bed.
        """
        stmt = (
            update(Student)
            .where(and_(Student.id == student_id, Student.room_id == room_id))
            .values(room_id=None, bed_number=None)
            .execution_options(synchronize_session=False)
        )
        return self.session.execute(stmt).rowcount
