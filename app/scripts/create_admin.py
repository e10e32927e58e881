import os
import logging
from app.core.config import get_settings, configure_logging
from app.db.session import Base, build_engine, build_session_factory
from app.db.models import _all  # noqa: F401
from app.db.models.user import User
from app.core.security import hash_password

logger = logging.getLogger(__name__)


def create_admin_user(db, email: str, username: str, password: str) -> User | None:
    """Crea el administrador si no existe ya un usuario con ese email o username."""
    existing_user = (
        db.query(User)
        .filter(
            (User.email == email) | (User.username == username)
        )
        .first()
    )

    if existing_user:
        logger.warning(
            "⚠️  Ya existe un usuario con ese email o username: %s (%s, rol %s)",
            existing_user.username, existing_user.email, existing_user.role,
        )
        return None

    admin_user = User(
        email=email,
        username=username,
        hashed_password=hash_password(password),
        role="admin"
    )

    try:
        db.add(admin_user)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("❌ Error creando el usuario administrador")
        raise

    logger.info("✅ Usuario administrador creado: %s (%s)", username, email)
    return admin_user


def main():
    settings = get_settings()
    configure_logging(settings.log_level)

    engine = build_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    db = build_session_factory(engine)()

    try:
        create_admin_user(
            db,
            email=os.getenv("ADMIN_EMAIL", "administrador@example.com"),
            username=os.getenv("ADMIN_USERNAME", "ADMINISTRADOR"),
            password=os.getenv("ADMIN_PASSWORD", "admin123"),  # 👉 luego la cambias
        )
    finally:
        db.close()


if __name__ == "__main__":
    main()
