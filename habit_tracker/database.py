from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from habit_tracker.config import DATABASE_URL


def make_engine(url: str):
    """Create an engine; SQLite connections may be shared with the scheduler thread"""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()