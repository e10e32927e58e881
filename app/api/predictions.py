from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session
from app.db.models.prediction import Prediction
from app.db.models.user import User
from app.schemas.prediction import PredictionIn, PredictionOut
from app.core.deps import get_db, get_current_user

router = APIRouter(prefix="/predictions", tags=["Predictions"])


def get_owned_prediction(db: Session, prediction_id: int, user: User) -> Prediction:
    prediction = db.get(Prediction, prediction_id)
    if not prediction:
        raise HTTPException(status_code=404, detail="Predicción no encontrada")
    # Solo el autor puede verla, modificarla o borrarla
    if prediction.user_id != user.id:
        raise HTTPException(status_code=403, detail="No autorizado")
    return prediction


@router.post("", response_model=PredictionOut, status_code=status.HTTP_201_CREATED)
def create_prediction(
    data: PredictionIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    prediction = Prediction(user_id=current_user.id, **data.model_dump())
    db.add(prediction)
    db.commit()
    db.refresh(prediction)
    return prediction


@router.get("/my-predictions", response_model=list[PredictionOut])
def get_my_predictions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return (
        db.query(Prediction)
        .filter(Prediction.user_id == current_user.id)
        .order_by(Prediction.created_at.desc(), Prediction.id.desc())
        .all()
    )


@router.get("/{prediction_id}", response_model=PredictionOut)
def get_prediction(
    prediction_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_owned_prediction(db, prediction_id, current_user)


@router.put("/{prediction_id}", response_model=PredictionOut)
def update_prediction(
    prediction_id: int,
    data: PredictionIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    prediction = get_owned_prediction(db, prediction_id, current_user)

    for field, value in data.model_dump().items():
        setattr(prediction, field, value)

    db.commit()
    db.refresh(prediction)
    return prediction


@router.delete("/{prediction_id}")
def delete_prediction(
    prediction_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    prediction = get_owned_prediction(db, prediction_id, current_user)
    db.delete(prediction)
    db.commit()
    return {"message": "Predicción eliminada"}
