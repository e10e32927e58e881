# app/db/models/prediction.py
from sqlalchemy import Integer, String, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from typing import TYPE_CHECKING
from app.db.session import Base
from datetime import datetime

if TYPE_CHECKING:
    from app.db.models.user import User

class Prediction(Base):
    __tablename__ = "predictions"
    __table_args__ = (
        CheckConstraint("position BETWEEN 1 AND 20", name="ck_prediction_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    race: Mapped[str] = mapped_column(String, nullable=False)
    driver: Mapped[str] = mapped_column(String, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())

    # Relaciones
    user: Mapped["User"] = relationship("User", back_populates="predictions")
