"""Configuration management for the Bigtable service broker."""

import os
from typing import Optional
from dataclasses import dataclass, field


@dataclass
class DatabaseConfig:
    """Database configuration."""
    type: str = "sqlite"
    sqlite_path: str = "bigtable_broker.db"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class APIConfig:
    """API configuration."""
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    username: Optional[str] = None
    password: Optional[str] = None
    enable_cors: bool = False


@dataclass
class GCPConfig:
    """Google Cloud configuration."""
    project_id: Optional[str] = None
    default_zone: str = "us-east1-b"
    user_agent: str = "gcp-service-broker"
    # JSON object of operator-defined plans keyed by plan name
    bigtable_plans: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    api: APIConfig = field(default_factory=APIConfig)
    gcp: GCPConfig = field(default_factory=GCPConfig)

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        config = cls()

        # Database config
        config.database.type = os.getenv('DB_TYPE', config.database.type)
        config.database.sqlite_path = os.getenv('SQLITE_PATH', config.database.sqlite_path)

        # API config
        config.api.host = os.getenv('API_HOST', config.api.host)
        config.api.port = int(os.getenv('API_PORT', str(config.api.port)))
        config.api.debug = os.getenv('API_DEBUG', 'false').lower() == 'true'
        config.api.username = os.getenv('BROKER_USERNAME')
        config.api.password = os.getenv('BROKER_PASSWORD')
        config.api.enable_cors = os.getenv('API_ENABLE_CORS', 'false').lower() == 'true'

        # Logging config
        config.logging.level = os.getenv('LOG_LEVEL', config.logging.level)
        config.logging.file_path = os.getenv('LOG_FILE_PATH')

        # GCP config
        config.gcp.project_id = os.getenv(
            'ROOT_SERVICE_ACCOUNT_PROJECT', os.getenv('GOOGLE_CLOUD_PROJECT')
        )
        config.gcp.default_zone = os.getenv('BIGTABLE_DEFAULT_ZONE', config.gcp.default_zone)
        config.gcp.user_agent = os.getenv('BROKER_USER_AGENT', config.gcp.user_agent)
        config.gcp.bigtable_plans = os.getenv('GSB_SERVICE_GOOGLE_BIGTABLE_PLANS')

        return config


# Global configuration instance
config = Config.from_env()
