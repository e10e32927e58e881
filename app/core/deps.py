from typing import Iterator
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session
from app.core.config import Settings
from app.core.security import decode_access_token
from app.db.models.user import User
from app.services.openf1 import OpenF1Client

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    # La factoría de sesiones la crea create_app y vive en app.state
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_openf1_client(request: Request) -> OpenF1Client:
    return request.app.state.openf1_client


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> User:
    try:
        payload = decode_access_token(token, settings.secret_key, settings.jwt_algorithm)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Token inválido")

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Usuario no encontrado")

    return user


def require_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Se requieren permisos de administrador",
        )
    return current_user
