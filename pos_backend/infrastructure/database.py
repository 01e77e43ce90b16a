from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from pos_backend.core.config import settings

Base = declarative_base()


def build_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        # Sessions are opened per request from FastAPI's threadpool.
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    # Models must be imported so their tables are registered on Base.metadata
    from pos_backend.domain import models  # noqa: F401
    Base.metadata.create_all(bind=engine)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = build_session_factory(engine)
