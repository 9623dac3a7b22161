from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

# Синхронный драйвер psycopg2, даже если в окружении указан asyncpg
database_url = settings.database_url.replace("postgresql+asyncpg://", "postgresql+psycopg2://")

engine_options = {"pool_pre_ping": True, "echo": settings.debug}
if database_url.startswith("sqlite"):
    engine_options["connect_args"] = {"check_same_thread": False}
else:
    engine_options["pool_size"] = settings.db_pool_size
    engine_options["max_overflow"] = settings.db_max_overflow

engine = create_engine(database_url, **engine_options)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Dependency для получения сессии БД"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
