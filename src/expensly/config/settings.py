"""Application settings loader from YAML configuration."""
import os
import yaml
from pathlib import Path
from dataclasses import dataclass

from expensly.utils.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"


@dataclass
class AppSettings:
    """Application-wide settings loaded from config.yaml."""

    # App info
    app_name: str
    app_version: str

    # Logging
    log_level: str
    log_max_file_size_mb: int
    log_backup_count: int

    # Polling
    polling_period_seconds: int
    polling_job_name: str
    permission_timeout_seconds: int

    # Calendar
    reference_year: int

    # Ledger
    max_transactions: int

    # Dedup
    dedup_retention_hours: int

    # Retry
    retry_max_retries: int
    retry_initial_delay_seconds: float
    retry_backoff_factor: float

    # Paths
    home_dir: str
    logs_dir: str
    log_file: str

    # Display
    currency_symbol: str
    date_format: str

    @property
    def polling_period_ms(self) -> int:
        return self.polling_period_seconds * 1000

    @property
    def logs_path(self) -> Path:
        home = os.getenv("EXPENSLY_HOME") or self.home_dir
        return Path(home).expanduser() / self.logs_dir

    @staticmethod
    def default_path() -> Path:
        """EXPENSLY_CONFIG, then EXPENSLY_HOME/config.yaml, then the packaged defaults."""
        env_path = os.getenv("EXPENSLY_CONFIG")
        if env_path:
            return Path(env_path)

        home = os.getenv("EXPENSLY_HOME")
        if home and (Path(home).expanduser() / "config.yaml").exists():
            return Path(home).expanduser() / "config.yaml"

        return DEFAULT_CONFIG_PATH

    @classmethod
    def load(cls, config_path: Path = None) -> "AppSettings":
        """Load settings from YAML file."""
        if config_path is None:
            config_path = cls.default_path()

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        try:
            settings = cls(
                app_name=config["app"]["name"],
                app_version=str(config["app"]["version"]),
                log_level=config["logging"]["level"],
                log_max_file_size_mb=config["logging"]["max_file_size_mb"],
                log_backup_count=config["logging"]["backup_count"],
                polling_period_seconds=config["polling"]["period_seconds"],
                polling_job_name=config["polling"]["job_name"],
                permission_timeout_seconds=config["polling"]["permission_timeout_seconds"],
                reference_year=config["calendar"]["reference_year"],
                max_transactions=config["ledger"]["max_transactions"],
                dedup_retention_hours=config["dedup"]["retention_hours"],
                retry_max_retries=config["retry"]["max_retries"],
                retry_initial_delay_seconds=config["retry"]["initial_delay_seconds"],
                retry_backoff_factor=config["retry"]["backoff_factor"],
                home_dir=config["paths"]["home_dir"],
                logs_dir=config["paths"]["logs_dir"],
                log_file=config["paths"]["log_file"],
                currency_symbol=config["display"]["currency_symbol"],
                date_format=config["display"]["date_format"]
            )
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Missing setting in {config_path}: {e}")

        settings.validate()
        return settings

    def validate(self) -> None:
        """Reject values the poll cycle cannot work with."""
        if self.polling_period_seconds < 1:
            raise ConfigError("Polling period must be at least 1 second")
        if self.permission_timeout_seconds <= 0:
            raise ConfigError("Permission timeout must be positive")
        if self.max_transactions < 1:
            raise ConfigError("max_transactions must be at least 1")
        if self.dedup_retention_hours < 1:
            raise ConfigError("Dedup retention must be at least 1 hour")
        if self.retry_max_retries < 0:
            raise ConfigError("retry.max_retries cannot be negative")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Unknown log level: {self.log_level}")

