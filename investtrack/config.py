from dataclasses import dataclass
from pathlib import Path
import os
from dotenv import load_dotenv
import logging
import sys
import structlog

from .exceptions import ConfigurationError

# Load environment variables early
load_dotenv()

# Step 1: Configure stdlib logging to use stderr
logging.basicConfig(
    format='%(asctime)s [%(levelname)-8s] %(message)s',
    stream=sys.stderr,
    level=logging.INFO,
    force=True
)

# Step 2: Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.KeyValueRenderer(key_order=['timestamp', 'level', 'event']),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("sqlite", "memory")


@dataclass
class Config:
    """Configuration for the investment tracker."""

    db_path: str = os.environ.get("INVESTTRACK_DB_PATH", "investtrack.db")
    store_backend: str = os.environ.get("INVESTTRACK_STORE", "sqlite")
    reports_dir: Path = Path(os.environ.get("REPORTS_DIR", "./reports"))

    log_level: str = os.environ.get("LOG_LEVEL", "INFO")
    environment: str = os.environ.get("ENVIRONMENT", "dev")

    def __post_init__(self):
        self.store_backend = self.store_backend.strip().lower()
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigurationError(
                f"Unsupported store backend: {self.store_backend}",
                config_key="INVESTTRACK_STORE",
                expected=" or ".join(STORE_BACKENDS)
            )

        self.reports_dir = Path(self.reports_dir)

        # Set logging level
        self.log_level = self.log_level.strip().upper()
        log_level = getattr(logging, self.log_level, None)
        if not isinstance(log_level, int):
            raise ConfigurationError(
                f"Unknown log level: {self.log_level}",
                config_key="LOG_LEVEL",
                expected="DEBUG, INFO, WARNING, ERROR or CRITICAL"
            )
        logging.getLogger().setLevel(log_level)
        for name in logging.root.manager.loggerDict:
            logging.getLogger(name).setLevel(log_level)

        logger.debug(f"Config loaded: backend={self.store_backend}, db={self.db_path}")


config = Config()
