import os
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in .env file")

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}


def engine_options(database_url: str) -> dict:
    """
    Connection settings per backend.
    SQLite is shared across the request threadpool; remote PostgreSQL requires SSL.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}

    options: dict = {
        "pool_size": 5,
        "max_overflow": 0,
        "pool_timeout": 30,
        "pool_recycle": 600,
    }
    if url.host and url.host not in LOCAL_HOSTS and "sslmode" not in url.query:
        options["connect_args"] = {"sslmode": "require"}
    return options


engine = create_engine(DATABASE_URL, pool_pre_ping=True, **engine_options(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Request-scoped session; always closed when the request finishes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
