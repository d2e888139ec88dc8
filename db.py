from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from config import DB_NAME

# Base class for the ORM models
Base = declarative_base()


def normalize_database_url(url: str, default_db_name: Optional[str] = DB_NAME) -> str:
    # Dokku Postgres and many Heroku style services use the older
    # 'postgres://' scheme. SQLAlchemy 2 prefers 'postgresql+psycopg2://'.
    # Normalize it here so the dialect loads correctly.
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg2://", 1)

    parsed = make_url(url)
    if not parsed.database and default_db_name and not parsed.drivername.startswith("sqlite"):
        parsed = parsed.set(database=default_db_name)
    return parsed.render_as_string(hide_password=False)


def build_engine(url: str) -> Engine:
    return create_engine(
        normalize_database_url(url),
        pool_pre_ping=True,
        future=True,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
