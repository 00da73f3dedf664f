from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from tixly.config import get_settings

settings = get_settings()

connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db():
    """Create tables and make sure the platform owner can receive fees."""
    import tixly.models  # noqa: F401
    from tixly.services.accounts import AccountService

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        AccountService.ensure_account(db, settings.platform_owner_address, username="platform")
    finally:
        db.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
