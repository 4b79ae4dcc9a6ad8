from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from tinda.core.config import get_settings

settings = get_settings()

# Render/Heroku hand out 'postgres://', SQLAlchemy wants 'postgresql://'
db_url = settings.database_url
if db_url and db_url.startswith("postgres://"):
    db_url = db_url.replace("postgres://", "postgresql://", 1)

engine_kwargs = {}
if db_url.startswith("sqlite"):
    # "check_same_thread" is ONLY for SQLite
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        # in-memory DB lives on one connection, share it
        engine_kwargs["poolclass"] = StaticPool
else:
    engine_kwargs["pool_pre_ping"] = True

engine = create_engine(db_url, **engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    from sqlalchemy.orm import Session
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
