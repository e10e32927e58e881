from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session, joinedload
from app.db.models.driver import Driver
from app.db.models.team import Team
from app.schemas.driver import DriverCreate, DriverUpdate, DriverOut
from app.core.deps import get_db, require_admin

router = APIRouter(tags=["Drivers"])


def _check_team(db: Session, team_id: int | None):
    if team_id is not None and not db.get(Team, team_id):
        raise HTTPException(status_code=400, detail="Escudería no encontrada")


def _check_unique_driver_id(db: Session, driver_id: int, exclude_id: int | None = None):
    query = db.query(Driver).filter(Driver.driver_id == driver_id)
    if exclude_id is not None:
        query = query.filter(Driver.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=400, detail="Ya existe un piloto con ese driver_id")


# -----------------------
# Públicas
# -----------------------
@router.get("/drivers", response_model=list[DriverOut])
def list_drivers(db: Session = Depends(get_db)):
    return (
        db.query(Driver)
        .options(joinedload(Driver.team))
        .order_by(Driver.points.desc(), Driver.surname)
        .all()
    )


@router.get("/drivers/{id}", response_model=DriverOut)
def get_driver(id: int, db: Session = Depends(get_db)):
    driver = db.get(Driver, id)
    if not driver:
        raise HTTPException(status_code=404, detail="Piloto no encontrado")
    return driver


@router.get("/driver-stats/{driver_id}", response_model=DriverOut)
def get_driver_stats(driver_id: int, db: Session = Depends(get_db)):
    """Busca por el identificador numérico del piloto, no por el id interno"""
    driver = db.query(Driver).filter(Driver.driver_id == driver_id).first()
    if not driver:
        raise HTTPException(status_code=404, detail="Piloto no encontrado")
    return driver


# -----------------------
# Solo admins
# -----------------------
@router.post("/drivers", response_model=DriverOut, status_code=status.HTTP_201_CREATED)
def create_driver(
    data: DriverCreate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    _check_unique_driver_id(db, data.driver_id)
    _check_team(db, data.team_id)

    driver = Driver(**data.model_dump())
    driver.code = driver.code.upper()
    db.add(driver)
    db.commit()
    db.refresh(driver)
    return driver


@router.put("/drivers/{id}", response_model=DriverOut)
def update_driver(
    id: int,
    data: DriverUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    driver = db.get(Driver, id)
    if not driver:
        raise HTTPException(status_code=404, detail="Piloto no encontrado")

    # team_id = null desasigna la escudería; los campos obligatorios ignoran null
    changes = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in ("team_id", "nationality")
    }
    if "driver_id" in changes:
        _check_unique_driver_id(db, changes["driver_id"], exclude_id=driver.id)
    if "team_id" in changes:
        _check_team(db, changes["team_id"])
    if changes.get("code"):
        changes["code"] = changes["code"].upper()

    for field, value in changes.items():
        setattr(driver, field, value)

    db.commit()
    db.refresh(driver)
    return driver


@router.delete("/drivers/{id}")
def delete_driver(
    id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    driver = db.get(Driver, id)
    if not driver:
        raise HTTPException(status_code=404, detail="Piloto no encontrado")
    db.delete(driver)
    db.commit()
    return {"message": "Piloto eliminado"}
