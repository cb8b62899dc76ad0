from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from uninest.core.database import BaseModel


class University(BaseModel):
    """University reference row, owned by the accounts subsystem."""

    __tablename__ = "universities"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    city: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<University(name={self.name}, city={self.city})>"
