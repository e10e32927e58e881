import argparse
import logging
from datetime import datetime, timezone
from app.core.config import get_settings, configure_logging
from app.db.session import Base, build_engine, build_session_factory
from app.db.models import _all  # noqa: F401
from app.services.openf1 import OpenF1Client, UpstreamError
from app.services.season_stats import sync_season_stats

logger = logging.getLogger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Recalcula las estadísticas de temporada desde OpenF1")
    parser.add_argument("--year", type=int, default=datetime.now(timezone.utc).year)
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    engine = build_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    db = build_session_factory(engine)()
    client = OpenF1Client(settings.openf1_base_url, settings.upstream_timeout)

    try:
        total = sync_season_stats(db, client, args.year)
        logger.info("✅ %d carreras procesadas", total)
        return 0
    except UpstreamError as e:
        db.rollback()
        logger.error("❌ No se pudieron descargar los resultados: %s", e)
        return 1
    finally:
        client.close()
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
