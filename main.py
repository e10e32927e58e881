import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings, get_settings, configure_logging
from app.db.session import Base, build_engine, build_session_factory

# Importar modelos para que SQLAlchemy los "vea" antes de crear las tablas
from app.db.models import _all  # noqa: F401

# Importar las rutas (los routers)
from app.api.auth import router as auth_router
from app.api.drivers import router as drivers_router
from app.api.teams import router as teams_router
from app.api.predictions import router as predictions_router
from app.api.races import router as races_router
from app.api.admin import router as admin_router
from app.services.openf1 import OpenF1Client

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, openf1_client: OpenF1Client | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="F1 Analytics API",
        version="1.0.0"
    )

    # Un engine y una factoría de sesiones por aplicación, sin globales
    engine = build_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.openf1_client = openf1_client or OpenF1Client(
        settings.openf1_base_url, settings.upstream_timeout
    )

    # Conectamos las piezas (routers)
    app.include_router(auth_router)
    app.include_router(drivers_router)
    app.include_router(teams_router)
    app.include_router(predictions_router)
    app.include_router(races_router)
    app.include_router(admin_router)

    # Configuramos el permiso para que el frontend pueda hablar con Python
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def read_root():
        return {"message": "F1 Analytics API funcionando 🏎️"}

    logger.info("Aplicación creada (BD: %s, OpenF1: %s)", engine.url, settings.openf1_base_url)
    return app


app = create_app()
