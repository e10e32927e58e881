# Importa todos los modelos para que Base.metadata los conozca antes de create_all
from app.db.models.user import User
from app.db.models.team import Team
from app.db.models.driver import Driver
from app.db.models.prediction import Prediction

__all__ = ["User", "Team", "Driver", "Prediction"]
