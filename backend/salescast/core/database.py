from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from salescast.core.config import settings

DATABASE_URL = settings.database_url

# Render hands out postgres:// URLs, SQLAlchemy wants postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# SQLite needs check_same_thread, Postgres must NOT have it
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    # models must be imported so their tables are registered on Base.metadata
    from salescast.models import forecast, user, whitelist  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_insert(db: Session, table):
    """INSERT construct with ON CONFLICT support for the bound database."""
    name = db.get_bind().dialect.name
    try:
        return _INSERTS[name](table)
    except KeyError:
        raise RuntimeError(f"Upsert is not supported on {name}") from None
