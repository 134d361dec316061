from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from urllib.parse import quote_plus
from library_service.config import settings


def build_database_url() -> str:
    """Build the database URL, preferring an explicit DATABASE_URL."""
    if settings.database_url:
        return settings.database_url
    
    db_user = quote_plus(settings.db_user or "")
    db_password = quote_plus(settings.db_password or "")
    credentials = f"{db_user}:{db_password}@" if db_user else ""
    return f"postgresql://{credentials}{settings.db_host}:{settings.db_port}/{settings.db_name}"


def build_engine(url: str):
    """Create a pooled engine; SQLite gets a thread-shareable connection and FK enforcement."""
    if make_url(url).get_backend_name() == "sqlite":
        sqlite_engine = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    # SSL connection arguments
    connect_args = {}
    if settings.db_ssl_mode != "disable":
        connect_args["sslmode"] = settings.db_ssl_mode
        if settings.db_ssl_cert:
            connect_args["sslcert"] = settings.db_ssl_cert
        if settings.db_ssl_key:
            connect_args["sslkey"] = settings.db_ssl_key
        if settings.db_ssl_root_cert:
            connect_args["sslrootcert"] = settings.db_ssl_root_cert

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        isolation_level=settings.db_isolation_level,
        echo=False,
        connect_args=connect_args
    )


DATABASE_URL = build_database_url()

engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
