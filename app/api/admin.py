from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session, joinedload
from app.db.models.user import User
from app.db.models.prediction import Prediction
from app.schemas.user import UserOut, AdminUserUpdate
from app.schemas.prediction import PredictionIn, AdminPredictionOut
from app.core.deps import get_db, require_admin
from app.core.security import hash_password

router = APIRouter(prefix="/admin", tags=["Admin"])

ROLES = ("user", "admin")


def _prediction_out(p: Prediction) -> dict:
    return {
        "id": p.id,
        "user_id": p.user_id,
        "username": p.user.username,
        "race": p.race,
        "driver": p.driver,
        "position": p.position,
        "notes": p.notes,
        "created_at": p.created_at,
        "updated_at": p.updated_at,
    }


# -----------------------
# Usuarios
# -----------------------
@router.get("/users", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db), current_user = Depends(require_admin)):
    return db.query(User).order_by(User.id).all()


@router.patch("/users/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    user_data: AdminUserUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(404, "Usuario no encontrado")

    if user_data.role not in ROLES:
        raise HTTPException(400, "Rol no válido")

    # 1. Actualizar Rol
    user.role = user_data.role

    # 2. Actualizar Contraseña (solo si viene en el JSON)
    if user_data.password and len(user_data.password.strip()) > 0:
        user.hashed_password = hash_password(user_data.password)

    db.commit()
    db.refresh(user)
    return user


@router.delete("/users/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db), current_user = Depends(require_admin)):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(404, "Usuario no encontrado")
    if user.id == current_user.id:
        raise HTTPException(400, "No puedes eliminar tu propia cuenta desde el panel")
    db.delete(user)
    db.commit()
    return {"message": "Usuario eliminado"}


# -----------------------
# Predicciones (de todos los usuarios)
# -----------------------
@router.get("/predictions", response_model=list[AdminPredictionOut])
def list_predictions(db: Session = Depends(get_db), current_user = Depends(require_admin)):
    predictions = (
        db.query(Prediction)
        .options(joinedload(Prediction.user))
        .order_by(Prediction.created_at.desc(), Prediction.id.desc())
        .all()
    )
    return [_prediction_out(p) for p in predictions]


@router.put("/predictions/{prediction_id}", response_model=AdminPredictionOut)
def update_prediction(
    prediction_id: int,
    data: PredictionIn,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    prediction = db.get(Prediction, prediction_id)
    if not prediction:
        raise HTTPException(404, "Predicción no encontrada")

    for field, value in data.model_dump().items():
        setattr(prediction, field, value)

    db.commit()
    db.refresh(prediction)
    return _prediction_out(prediction)


@router.delete("/predictions/{prediction_id}")
def delete_prediction(
    prediction_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin)
):
    prediction = db.get(Prediction, prediction_id)
    if not prediction:
        raise HTTPException(404, "Predicción no encontrada")
    db.delete(prediction)
    db.commit()
    return {"message": "Predicción eliminada"}
