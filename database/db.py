from sqlalchemy import create_engine               # SQLAlchemy engine factory
from sqlalchemy.orm import declarative_base, sessionmaker

from config.settings import settings               # ✅ environment settings

# ✅ SQLite needs check_same_thread=False because FastAPI serves sync routes from a thread pool
_connect_args = {"check_same_thread": False} if settings.IS_SQLITE else {}

engine = create_engine(settings.DATABASE_URL, connect_args=_connect_args, pool_pre_ping=True)

# ✅ session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ declarative base shared by every model
Base = declarative_base()


def get_db():
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create every table known to the models package."""
    import models  # noqa: F401  (registers the mappers on Base.metadata)

    Base.metadata.create_all(bind=bind or engine)
