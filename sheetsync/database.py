# sheetsync/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from sheetsync import config

# SQLite needs to be told that FastAPI's threadpool may touch the connection
connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(config.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models
Base = declarative_base()


def init_db(bind=None):
    # Import models so they register on Base.metadata
    from sheetsync.models import sheet, user  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
