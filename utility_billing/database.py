"""
SQLAlchemy engine and session factory for the "sql" data backend
"""
import logging

from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from utility_billing.core.config import settings

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if not DATABASE_URL:
    raise ValueError("[ERROR] DATABASE_URL not found!")

IS_SQLITE = DATABASE_URL.lower().startswith("sqlite")

engine = create_engine(
    DATABASE_URL,
    connect_args={
        "check_same_thread": False  # SQLite multi-thread
    } if IS_SQLITE else {
        "connect_timeout": 10,
        "options": "-c statement_timeout=30000"  # 30s query timeout
    },
    echo=False,
    pool_pre_ping=True,
    **({} if IS_SQLITE else {"pool_size": 5, "max_overflow": 10, "pool_recycle": 3600, "pool_timeout": 30}),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


def test_connection() -> bool:
    """Test database connection - NON-BLOCKING."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
            safe_url = DATABASE_URL.split("@")[-1]
            logger.info(f"[OK] Database connected: {safe_url}")
            return True
    except Exception as e:
        logger.warning(f"[WARN] Database connection failed (continuing): {e}")
        return False


def init_db() -> bool:
    """Create tables for every registered model - NON-BLOCKING."""
    try:
        from utility_billing.db.base import Base
        import utility_billing.models  # noqa: F401  registers the models

        Base.metadata.create_all(bind=engine)
        logger.info("[OK] Database tables initialized!")
        return True
    except Exception as e:
        logger.warning(f"[WARN] Database init warning: {e}")
        return False


def close_db_connection():
    """Close database connections."""
    engine.dispose()
    logger.info("[OK] Database connections closed")
