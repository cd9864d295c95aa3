"""Composition root for docbridge.

This module is the ONLY location that imports both the core and the
concrete MongoDB adapter. Applications call open_data_source() to get a
DataSource wired to a shared MongoDB client, then define their models on it.
"""

import logging
import sys

from docbridge.adapters.store.mongodb import MongoDocumentStore
from docbridge.config import Settings, load_settings
from docbridge.core.datasource import DataSource


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_store(settings: Settings) -> MongoDocumentStore:
    """Instantiate the MongoDB store from settings (no I/O happens here)."""
    return MongoDocumentStore(
        url=settings.mongodb_url,
        database=settings.mongodb_database,
        server_selection_timeout_ms=settings.mongodb_server_selection_timeout_ms,
        max_pool_size=settings.mongodb_max_pool_size,
        tz_aware=settings.mongodb_tz_aware,
    )


async def open_data_source(
    settings: Settings | None = None,
    ping: bool = True,
) -> DataSource:
    """Load configuration and return a DataSource over MongoDB.

    Steps:
    1. Load configuration from environment (unless given)
    2. Instantiate the MongoDB store
    3. Optionally check connectivity

    Models are defined on the returned DataSource by the caller; call
    DataSource.ensure_indexes() afterwards when settings ask for it
    (see ensure_indexes_on_connect).

    Raises:
        pymongo.errors.ServerSelectionTimeoutError: If `ping` is set and
            the server cannot be reached.
    """
    if settings is None:
        settings = load_settings()
    logger = logging.getLogger(__name__)

    store = build_store(settings)
    data_source = DataSource(store)
    if ping:
        try:
            await data_source.ping()
        except Exception as e:
            logger.error(f"MongoDB at {settings.mongodb_url} is unreachable: {e}")
            await data_source.close()
            raise
    logger.info(f"Data source ready: database {settings.mongodb_database}")
    return data_source


async def prepare(data_source: DataSource, settings: Settings) -> None:
    """Apply startup schema work requested by settings."""
    if settings.ensure_indexes_on_connect:
        await data_source.ensure_indexes()
