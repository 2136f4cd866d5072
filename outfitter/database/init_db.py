"""Bring the schema to the latest migration: ``python -m outfitter.database.init_db``."""

from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

import outfitter.database.db as db_module
from outfitter.core.startup import bootstrap
from outfitter.models import Base

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def build_alembic_config(database_url: str) -> AlembicConfig:
    cfg = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def init_db(database_url: str | None = None, run_bootstrap: bool = True) -> None:
    if run_bootstrap:
        bootstrap()
    if database_url is not None:
        db_module.reset_engine(database_url)
    active_url = db_module.get_active_database_url()

    command.upgrade(build_alembic_config(active_url), "head")
    Base.metadata.create_all(bind=db_module.get_engine())
    logger.info(
        "database.tables.created",
        extra={"event": "database.tables.created", "database_url_scheme": active_url.split("://", 1)[0]},
    )


if __name__ == "__main__":
    init_db()
