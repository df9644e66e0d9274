"""
Configuration management for the campsite availability monitor
"""
import os
import yaml
from pathlib import Path
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, field_validator

from .models import CampsiteAvailability


class APIConfig(BaseModel):
    base_url: str = "https://www.recreation.gov"
    timeout: int = 10
    headers: Dict[str, str] = Field(default_factory=lambda: {
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "en-US,en;q=0.9",
        "Referer": "https://www.recreation.gov/"
    })


class MonitorConfig(BaseModel):
    interval_seconds: float = Field(default=60, gt=0)
    notify_suppression_minutes: float = Field(default=10, ge=0)
    batch_size: int = Field(default=10, gt=0)
    batch_delay_ms: int = Field(default=2000, ge=0)
    rate_limit_pause_seconds: float = Field(default=120, ge=0)
    group_backoff_seconds: float = Field(default=600, ge=0)
    max_rate_limit_retries: int = Field(default=3, ge=0)
    available_statuses: List[str] = Field(default_factory=lambda: [
        CampsiteAvailability.AVAILABLE.value,
        CampsiteAvailability.OPEN.value
    ])
    timezone: str = "America/Los_Angeles"

    @field_validator("available_statuses", mode="before")
    @classmethod
    def split_statuses(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        statuses = [s.strip() for s in value if s and s.strip()]
        if not statuses:
            raise ValueError("at least one available status is required")
        return statuses


class DatabaseConfig(BaseModel):
    url: str = "sqlite+aiosqlite:///reservations.db"


class EmailConfig(BaseModel):
    enabled: bool = False
    sendgrid_api_key: Optional[str] = None
    from_address: str = "alerts@campwatch.local"
    from_name: str = "Campsite Alerts"


class NotificationsConfig(BaseModel):
    email: EmailConfig = Field(default_factory=EmailConfig)
    base_url: str = "http://localhost:3000"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = None


class Config(BaseModel):
    """Main configuration class"""
    api: APIConfig = Field(default_factory=APIConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    
    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file"""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        
        with open(path) as f:
            data = yaml.safe_load(f)
        
        return cls(**(data or {}))
    
    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables, defaults for anything unset"""
        env = os.environ
        
        monitor = {}
        for key, var in (
            ("interval_seconds", "MONITOR_INTERVAL_SECONDS"),
            ("notify_suppression_minutes", "NOTIFY_SUPPRESSION_MINUTES"),
            ("batch_size", "MONITOR_BATCH_SIZE"),
            ("batch_delay_ms", "MONITOR_BATCH_DELAY_MS"),
            ("rate_limit_pause_seconds", "RATE_LIMIT_PAUSE_SECONDS"),
            ("group_backoff_seconds", "GROUP_BACKOFF_SECONDS"),
            ("available_statuses", "AVAILABLE_CAMPSITE_STATUSES"),
            ("timezone", "MONITOR_TIMEZONE"),
        ):
            if env.get(var):
                monitor[key] = env[var]
        
        email = EmailConfig(
            enabled=bool(env.get("SENDGRID_API_KEY")),
            sendgrid_api_key=env.get("SENDGRID_API_KEY"),
        )
        if env.get("EMAIL_FROM"):
            email.from_address = env["EMAIL_FROM"]
        if env.get("EMAIL_NAME"):
            email.from_name = env["EMAIL_NAME"]
        
        notifications = NotificationsConfig(email=email)
        if env.get("EXTERNAL_BASE_URL"):
            notifications.base_url = env["EXTERNAL_BASE_URL"]
        
        api = APIConfig()
        if env.get("RECGOV_BASE_URL"):
            api.base_url = env["RECGOV_BASE_URL"]
        
        return cls(
            api=api,
            monitor=MonitorConfig(**monitor),
            database=DatabaseConfig(url=env.get("DATABASE_URL", DatabaseConfig().url)),
            notifications=notifications,
            logging=LoggingConfig(
                level=env.get("LOG_LEVEL", "INFO"),
                file=env.get("LOG_FILE"),
            ),
        )
    
    def to_yaml(self, path: str | Path):
        """Save configuration to YAML file"""
        path = Path(path)
        with open(path, 'w') as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)


def load_config(path: Optional[str] = None) -> Config:
    """Load configuration from file or environment"""
    if path:
        return Config.from_yaml(path)
    
    # Try default locations
    default_paths = [
        Path("config/config.yaml"),
        Path("config.yaml"),
        Path.home() / ".campwatch" / "config.yaml",
    ]
    
    for p in default_paths:
        if p.exists():
            return Config.from_yaml(p)
    
    return Config.from_env()
