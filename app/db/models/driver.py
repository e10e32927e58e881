from sqlalchemy import String, Integer, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from typing import Optional, TYPE_CHECKING
from app.db.session import Base
from datetime import datetime

if TYPE_CHECKING:
    from app.db.models.team import Team

class Driver(Base):
    __tablename__ = "drivers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    driver_id: Mapped[int] = mapped_column(Integer, unique=True, index=True, nullable=False)
    driver_number: Mapped[int] = mapped_column(Integer, index=True, nullable=False) # Ej: 14
    code: Mapped[str] = mapped_column(String(3), nullable=False) # Ej: ALO
    forename: Mapped[str] = mapped_column(String, nullable=False) # Ej: Fernando
    surname: Mapped[str] = mapped_column(String, nullable=False) # Ej: Alonso
    nationality: Mapped[str | None] = mapped_column(String, nullable=True)
    team_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("teams.id"), nullable=True)

    # Estadísticas de temporada (solo las escribe el sync, nunca el reconciliador)
    points: Mapped[float] = mapped_column(default=0)
    wins: Mapped[int] = mapped_column(Integer, default=0)
    podiums: Mapped[int] = mapped_column(Integer, default=0)
    fastest_laps: Mapped[int] = mapped_column(Integer, default=0)
    avg_position: Mapped[float] = mapped_column(default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    # Relaciones
    team: Mapped[Optional["Team"]] = relationship("Team", back_populates="drivers")

    @property
    def full_name(self) -> str:
        return f"{self.forename} {self.surname}"
