from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.config import settings


def _engine_options(url: str) -> dict:
    """Connection options for the configured database backend."""
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live on a single shared connection
        if ":memory:" in url or url.rstrip("/").endswith("sqlite:"):
            options["poolclass"] = StaticPool
        return options

    # pool_size + max_overflow bounds concurrent listing requests per process
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,  # Verify connections before using
        "pool_recycle": 3600,  # Recycle connections after 1 hour
        "connect_args": {
            "connect_timeout": 10,
            "options": "-c statement_timeout=5000"  # 5 second statement timeout
        },
    }


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))


def _unicode_lower(value):
    return value.casefold() if isinstance(value, str) else value


if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _register_unicode_lower(dbapi_connection, connection_record):
        """Replace SQLite's ASCII-only lower(), which ILIKE compiles to."""
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency to get database session."""
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
