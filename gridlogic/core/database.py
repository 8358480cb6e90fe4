from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from gridlogic.core.config import settings

connect_args = {}
engine_options = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # FastAPI serves requests from a thread pool
    connect_args["check_same_thread"] = False
    if settings.DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        # one shared connection, otherwise every connection gets its own empty database
        engine_options["poolclass"] = StaticPool

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, **engine_options)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a database session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
