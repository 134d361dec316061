from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

# Get the project directory (parent of library_service directory)
PROJECT_DIR = Path(__file__).parent.parent
ENV_FILE = PROJECT_DIR / ".env"

class Settings(BaseSettings):
    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    
    # Full SQLAlchemy URL; takes precedence over the db_* fields below
    database_url: Optional[str] = None
    
    # Database settings - confidential values from .env
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "library"
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    
    # Connection pool
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_isolation_level: str = "READ COMMITTED"  # write paths take explicit row locks
    
    # Database SSL settings
    db_ssl_mode: str = "prefer"  # Options: disable, allow, prefer, require, verify-ca, verify-full
    db_ssl_cert: Optional[str] = None  # Path to client certificate
    db_ssl_key: Optional[str] = None  # Path to client key
    db_ssl_root_cert: Optional[str] = None  # Path to root certificate
    
    # IANA timezone used for "today" (e.g. Asia/Kuala_Lumpur); unset means server local date
    timezone: Optional[str] = None
    
    # Circulation policy
    max_active_borrows: int = 5
    default_borrow_days: int = 14
    fine_per_day: float = 2.0
    lost_book_fine: float = 100.0
    count_overdue_toward_limit: bool = True
    low_stock_ratio: float = 0.2
    
    class Config:
        env_file = str(ENV_FILE) if ENV_FILE.exists() else ".env"
        case_sensitive = False

settings = Settings()
