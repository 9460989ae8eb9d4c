"""
Database Connection and Session Management
Async raw-SQL access through `databases`, table metadata through SQLAlchemy
"""

import logging

from databases import Database
from sqlalchemy import create_engine, MetaData
from sqlalchemy.orm import declarative_base
from certissuer.config import settings

logger = logging.getLogger(__name__)

# Database URL
DATABASE_URL = settings.DATABASE_URL

if DATABASE_URL.startswith("sqlite"):
    db_options = {}
else:
    db_options = {"min_size": 1, "max_size": 10}

# Create database instance for async queries
database = Database(DATABASE_URL, **db_options)

# Synchronous engine, used for creating tables outside of migrations
engine = create_engine(
    DATABASE_URL.replace("postgresql://", "postgresql+psycopg2://")
    if "postgresql://" in DATABASE_URL else DATABASE_URL
)

# Metadata for models
metadata = MetaData()

# Base class for models
Base = declarative_base(metadata=metadata)


def create_tables():
    """Create any missing tables for the registered models"""
    import certissuer.models  # noqa: F401  registers the tables on metadata
    metadata.create_all(engine)


async def connect_db():
    """Connect to database on startup"""
    await database.connect()
    logger.info("[DB] connected")


async def disconnect_db():
    """Disconnect from database on shutdown"""
    await database.disconnect()
    logger.info("[DB] disconnected")
