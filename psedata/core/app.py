from __future__ import annotations

from psedata.core.config import Settings, settings
from psedata.core.logging import configure_logging
from psedata.data.engines import engine_from_settings
from psedata.data.store import Store, create_db


def create_store(config: Settings | None = None) -> Store:
    """
    Configure logging and provision the database named by the settings.

    Returns an open Store; the caller owns it and must close it.
    """

    config = config or settings
    configure_logging(config.log_level, config.log_dir)
    engine = engine_from_settings(config)
    return create_db(config.connection_info(), engine, time_zone=config.time_zone)
