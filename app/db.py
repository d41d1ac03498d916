# app/db.py
# =================================================================================
# 🗄️ DATABASE CONFIGURATION AND CONNECTION
# ---------------------------------------------------------------------------------
# Centralises the SQLAlchemy engine/session setup, with conditional logic for
# SQLite (local development, tests) and PostgreSQL (production).
# Every connection carries an explicit timeout so a stuck query fails the
# request instead of hanging it.
# =================================================================================

# --- Imports ---
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from loguru import logger

# --- Database URL resolution ---
DATABASE_URL = os.getenv("DATABASE_URL", "").strip()

# 1. Engine the deployment insists on ('postgres' refuses to fall back to SQLite).
FORCE_DB = os.getenv("FORCE_DB", "sqlite").strip().lower()

# 2. Unresolved platform placeholders (e.g. "${{Postgres.DATABASE_URL}}") count as empty.
if DATABASE_URL.startswith("${{") and DATABASE_URL.endswith("}}"):
    logger.warning("DATABASE_URL looks like an unresolved placeholder: {}", DATABASE_URL)
    DATABASE_URL = ""

# 3. Empty URL: either abort (production) or use a local SQLite file.
if not DATABASE_URL:
    if FORCE_DB == "postgres":
        raise RuntimeError(
            "FATAL: DATABASE_URL is not available and FORCE_DB=postgres. "
            "Aborting to avoid an accidental SQLite fallback in production."
        )
    logger.warning("DATABASE_URL is empty. Falling back to local SQLite.")
    current_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.abspath(os.path.join(current_dir, ".."))
    db_path = os.path.join(project_root, "wedding.db")
    DATABASE_URL = f"sqlite:///{db_path}"

# Upper bound for a single storage call (seconds).
DB_TIMEOUT_SECONDS = float(os.getenv("DB_TIMEOUT_SECONDS", "10"))


def build_engine(url: str, timeout_s: float = DB_TIMEOUT_SECONDS, **kwargs):
    """Creates an engine for `url` with the per-dialect timeout options applied."""
    if url.startswith("sqlite"):
        # SQLite: connections are shared across threads; busy timeout in seconds.
        connect_args = {"check_same_thread": False, "timeout": timeout_s}
    else:
        # PostgreSQL: connect timeout (s) + server-side statement timeout (ms).
        connect_args = {
            "connect_timeout": int(timeout_s),
            "options": f"-c statement_timeout={int(timeout_s * 1000)}",
        }
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True, **kwargs)


# --- Engine ---
if DATABASE_URL.startswith("sqlite"):
    logger.info("DB in use → SQLite")
else:
    logger.info("DB in use → PostgreSQL (or non-SQLite)")
engine = build_engine(DATABASE_URL)

# --- Session factory and declarative base ---
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """FastAPI dependency that yields one DB session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =================================================================================
# 🔎 STARTUP: LOG WHICH DATABASE IS REALLY IN USE
# =================================================================================
def log_db_path_on_startup() -> None:
    """Writes the active database driver (and file path for SQLite) to the logs."""
    try:
        url = engine.url
        logger.info("DB driver in use → {}", url.drivername)
        if url.drivername == "sqlite":
            db_file = getattr(url, "database", None)
            abs_path = os.path.abspath(db_file) if db_file else "<memory>"
            logger.info("DB path → {} (abs={})", db_file, abs_path)
    except Exception as e:
        logger.warning("Could not resolve database information: {}", e)
