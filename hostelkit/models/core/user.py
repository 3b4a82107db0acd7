# models/core/user.py
from typing import Union

from sqlalchemy import Boolean, Enum as SAEnum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from hostelkit.models.base import TimestampModel, UserRole


class User(TimestampModel):
    """
    Login account (admin, owner, manager or student).
    """
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    email: Mapped[Union[str, None]] = mapped_column(String(255), index=True)
    phone: Mapped[Union[str, None]] = mapped_column(String(20))
    full_name: Mapped[str] = mapped_column(String(255))
    role: Mapped[UserRole] = mapped_column(SAEnum(UserRole, name="user_role"))
    hashed_password: Mapped[str] = mapped_column(String(255))

    hostel_id: Mapped[Union[str, None]] = mapped_column(
        ForeignKey("hostels.id", ondelete="SET NULL"),
        index=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role.value}>"
