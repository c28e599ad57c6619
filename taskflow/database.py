import logging
import threading
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from taskflow.config.settings import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

# SQLite connections are shared across FastAPI's worker threads
connect_args = {"check_same_thread": False} if settings.is_sqlite() else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """Run one logical operation: commit on success, roll back on any error"""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


class DatabaseState:
    """Connection lifecycle shared by the startup connector and request handling"""

    def __init__(self):
        self._ready = threading.Event()
        self._lock = threading.Lock()
        self.error = "Connecting to database..."
        self.attempts = 0

    @property
    def ready(self) -> bool:
        return self._ready.is_set()

    def record_attempt(self) -> int:
        with self._lock:
            self.attempts += 1
            return self.attempts

    def mark_ready(self):
        with self._lock:
            self.error = ""
        self._ready.set()

    def mark_failed(self, error: str):
        with self._lock:
            self.error = error
        self._ready.clear()


def init_database(bind=None):
    """Create tables and seed reference data on an empty database"""
    # Register every model on Base.metadata before create_all
    from taskflow import models  # noqa: F401
    from taskflow.services.seed import seed_defaults

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    db = Session(bind=bind)
    try:
        seed_defaults(db)
    finally:
        db.close()
    logger.info("Database ready (%s)", bind.url.get_backend_name())
