"""
Schema bootstrap.

Runs the bundled alembic migrations up to head against the configured
engine. Safe to call on every start: an up-to-date database is left as is.
"""

from pathlib import Path

from alembic import command
from alembic.config import Config

from chatline.config import get_settings
from chatline.core import get_logger
from chatline.db.engine import get_engine

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def get_alembic_config(database_url: str | None = None) -> Config:
    """Build an alembic Config without requiring an alembic.ini on disk."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option(
        "sqlalchemy.url", database_url or get_settings().database_url
    )
    return cfg


def init_database() -> None:
    """Create or upgrade the schema to the latest revision."""
    engine = get_engine()
    cfg = get_alembic_config(engine.url.render_as_string(hide_password=False))
    with engine.begin() as connection:
        cfg.attributes["connection"] = connection
        command.upgrade(cfg, "head")
    logger.info("Database schema ready", data={"dialect": engine.dialect.name})
