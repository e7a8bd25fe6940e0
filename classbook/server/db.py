import os
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from classbook.config import get_settings


settings = get_settings()
engine = create_engine(
    settings.database_url, connect_args={"check_same_thread": False}
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_database():
    if settings.database_url.startswith("sqlite:///./") and not os.path.exists("./data"):
        os.makedirs("./data")
    Base.metadata.create_all(bind=engine)


def get_db():
    """Provide a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
