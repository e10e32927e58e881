import logging
from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session
from app.schemas.user import UserCreate, UserLogin, UserOut, TokenOut, PasswordChange
from app.db.models.user import User
from app.core.config import Settings
from app.core.security import hash_password, verify_password, create_access_token
from app.core.deps import get_db, get_current_user, get_settings_dep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def issue_token(user: User, settings: Settings) -> str:
    return create_access_token(
        {
            "sub": str(user.id),
            "username": user.username,
            "role": user.role,
        },
        settings.secret_key,
        settings.jwt_algorithm,
        settings.access_token_expire_minutes,
    )


@router.post("/register", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def register(
    user: UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    # 1. Validar que no exista email o username
    existing_user = db.query(User).filter(
        (User.email == user.email) |
        (User.username == user.username)
    ).first()
    if existing_user:
        raise HTTPException(status_code=400, detail="El email o el usuario ya está registrado")

    # 2. Crear usuario
    new_user = User(
        email=user.email,
        username=user.username,
        hashed_password=hash_password(user.password),
        role="user" # Por defecto
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    logger.info("Nuevo usuario registrado: %s", new_user.username)

    return {
        "message": "Usuario creado exitosamente",
        "access_token": issue_token(new_user, settings),
        "token_type": "bearer",
        "user": new_user,
    }


@router.post("/login", response_model=TokenOut)
def login(
    user: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    db_user = db.query(User).filter(User.email == user.email).first()
    if not db_user or not verify_password(user.password, db_user.hashed_password):
        raise HTTPException(status_code=401, detail="Credenciales incorrectas")

    return {
        "message": "Login correcto",
        "access_token": issue_token(db_user, settings),
        "token_type": "bearer",
        "user": db_user,
    }


@router.get("/me", response_model=UserOut)
def get_current_user_data(current_user: User = Depends(get_current_user)):
    """Devuelve los datos del usuario logueado (sin la contraseña)"""
    return current_user


@router.post("/change-password")
def change_password(
    data: PasswordChange,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = db.get(User, current_user.id)

    if not verify_password(data.current_password, user.hashed_password):
        raise HTTPException(401, "Contraseña actual incorrecta")

    user.hashed_password = hash_password(data.new_password)
    db.commit()

    return {"message": "Contraseña actualizada"}


@router.delete("/me")
def delete_account(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = db.get(User, current_user.id)
    # Las predicciones se borran en cascada
    db.delete(user)
    db.commit()
    logger.info("Cuenta eliminada: %s", user.username)

    return {"message": "Cuenta eliminada"}
