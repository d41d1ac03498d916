# create_db.py

# =================================================================================
# 🏗️ LOCAL DATABASE CREATION
# ---------------------------------------------------------------------------------
# Creates every table defined in app/models.py on the configured database.
# Meant for local development; production schema changes go through Alembic.
# =================================================================================

from loguru import logger

from app.db import engine, Base
# Importing the models registers their tables on Base.metadata.
from app import models  # noqa: F401


def create_database_tables():
    """Creates all tables bound to `Base`."""
    logger.info("Creating database tables on {}", engine.url.drivername)
    Base.metadata.create_all(bind=engine)
    logger.info("✔️ Tables created: {}", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    create_database_tables()
