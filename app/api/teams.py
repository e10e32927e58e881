from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session, selectinload
from app.db.models.team import Team
from app.schemas.team import TeamCreate, TeamUpdate, TeamOut
from app.core.deps import get_db, require_admin

router = APIRouter(prefix="/teams", tags=["Teams"])


def _check_unique_name(db: Session, name: str, exclude_id: int | None = None):
    query = db.query(Team).filter(Team.name == name)
    if exclude_id is not None:
        query = query.filter(Team.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=400, detail="Ya existe una escudería con ese nombre")


@router.get("", response_model=list[TeamOut])
def list_teams(db: Session = Depends(get_db)):
    return (
        db.query(Team)
        .options(selectinload(Team.drivers))
        .order_by(Team.points.desc(), Team.name)
        .all()
    )


@router.get("/{team_id}", response_model=TeamOut)
def get_team(team_id: int, db: Session = Depends(get_db)):
    team = db.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Escudería no encontrada")
    return team


@router.post("", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
def create_team(
    data: TeamCreate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    _check_unique_name(db, data.name)

    team = Team(**data.model_dump())
    db.add(team)
    db.commit()
    db.refresh(team)
    return team


@router.put("/{team_id}", response_model=TeamOut)
def update_team(
    team_id: int,
    data: TeamUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    team = db.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Escudería no encontrada")

    changes = {
        k: v for k, v in data.model_dump(exclude_unset=True).items()
        if v is not None or k in ("base", "team_principal", "founded_year", "logo")
    }
    if "name" in changes:
        _check_unique_name(db, changes["name"], exclude_id=team.id)

    for field, value in changes.items():
        setattr(team, field, value)

    db.commit()
    db.refresh(team)
    return team


@router.delete("/{team_id}")
def delete_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(require_admin),
):
    team = db.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Escudería no encontrada")

    # Los pilotos se quedan sin escudería, no se borran
    for driver in team.drivers:
        driver.team_id = None

    db.delete(team)
    db.commit()
    return {"message": "Escudería eliminada"}
