from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from contacts_api.config import get_settings

SQLALCHEMY_DATABASE_URL = get_settings().database_url

connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
