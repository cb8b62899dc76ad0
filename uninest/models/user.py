import enum
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from uninest.core.database import BaseModel

if TYPE_CHECKING:
    from uninest.models.university import University

class GenderEnum(str, enum.Enum):

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

class UserRoleEnum(str, enum.Enum):

    STUDENT = "student"
    LANDLORD = "landlord"
    ADMIN = "admin"

class User(BaseModel):

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    first_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    last_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    avatar_url: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    gender: Mapped[Optional[GenderEnum]] = mapped_column(
        Enum(GenderEnum, name="gender_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )

    role: Mapped[UserRoleEnum] = mapped_column(
        Enum(UserRoleEnum, name="user_role_enum", values_callable=lambda x: [e.value for e in x]),
        default=UserRoleEnum.STUDENT,
        nullable=False,
    )

    university_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("universities.id", ondelete="SET NULL"),
        nullable=True,
    )

    is_blocked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    university: Mapped[Optional["University"]] = relationship(
        "University",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_users_role", "role"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role={self.role})>"
