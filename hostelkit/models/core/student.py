# models/core/student.py
from datetime import date
from decimal import Decimal
from typing import Union

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, Enum as SAEnum, text
from sqlalchemy.orm import Mapped, mapped_column

from hostelkit.models.base import FeeStatus, Gender, StudentStatus, TimestampModel


class Student(TimestampModel):
    """
    Resident profile linked to a login account and a hostel.

    `room_id`/`bed_number` are set only while the student is ACTIVE and
    are written by the occupancy service. `fee_status` is a projection
    recomputed by the payment service.
    """
    __tablename__ = "students"
    __table_args__ = (
        # A bed can be held by at most one active student; departed
        # students keep no bed so their rows never collide.
        Index(
            "uq_student_active_bed",
            "room_id",
            "bed_number",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
        Index("ix_student_hostel_status", "hostel_id", "status"),
    )

    user_id: Mapped[Union[str, None]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        unique=True,
    )
    hostel_id: Mapped[str] = mapped_column(
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[Union[str, None]] = mapped_column(
        ForeignKey("rooms.id", ondelete="SET NULL"),
        index=True,
    )
    bed_number: Mapped[Union[str, None]] = mapped_column(String(10))

    # Personal
    full_name: Mapped[str] = mapped_column(String(100))
    father_name: Mapped[Union[str, None]] = mapped_column(String(100))
    cnic: Mapped[str] = mapped_column(String(20), index=True)
    date_of_birth: Mapped[Union[date, None]] = mapped_column(Date)
    gender: Mapped[Union[Gender, None]] = mapped_column(SAEnum(Gender, name="gender"))
    phone: Mapped[Union[str, None]] = mapped_column(String(20))
    email: Mapped[Union[str, None]] = mapped_column(String(255))
    permanent_address: Mapped[Union[str, None]] = mapped_column(String(500))

    # Emergency contact
    emergency_contact_name: Mapped[Union[str, None]] = mapped_column(String(100))
    emergency_contact_relation: Mapped[Union[str, None]] = mapped_column(String(50))
    emergency_contact_phone: Mapped[Union[str, None]] = mapped_column(String(20))

    # Academic
    institution: Mapped[Union[str, None]] = mapped_column(String(200))
    course: Mapped[Union[str, None]] = mapped_column(String(100))

    # Residency & fees
    join_date: Mapped[date] = mapped_column(Date, default=date.today)
    leave_date: Mapped[Union[date, None]] = mapped_column(Date)
    monthly_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    fee_status: Mapped[FeeStatus] = mapped_column(
        SAEnum(FeeStatus, name="fee_status"),
        default=FeeStatus.DUE,
        index=True,
    )
    status: Mapped[StudentStatus] = mapped_column(
        SAEnum(StudentStatus, name="student_status"),
        default=StudentStatus.ACTIVE,
    )

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE

    @property
    def has_bed(self) -> bool:
        return self.room_id is not None

    def __repr__(self) -> str:
        return f"<Student id={self.id} name={self.full_name!r} status={self.status.value}>"
