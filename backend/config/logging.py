import logging
import logging.handlers
import os
from typing import Optional

# Default logs directory sits next to the backend packages
DEFAULT_LOGS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'logs')

NOISY_LOGGERS = {
    'uvicorn.access': logging.WARNING,
    'sqlalchemy.engine': logging.WARNING,
    'httpx': logging.WARNING,
    'openai': logging.INFO,
    'botocore': logging.WARNING,
}

def setup_logging(logs_dir: Optional[str] = None, console_level: int = logging.INFO):
    """Configure root logging with rotating files and a console handler."""
    logs_dir = logs_dir or DEFAULT_LOGS_DIR
    os.makedirs(logs_dir, exist_ok=True)

    # Create formatters
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(levelname)s: %(message)s'
    )

    # File handler for all logs
    all_handler = logging.handlers.RotatingFileHandler(
        os.path.join(logs_dir, 'flashcards.log'),
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    all_handler.setFormatter(file_formatter)
    all_handler.setLevel(logging.DEBUG)

    # File handler for errors only
    error_handler = logging.handlers.RotatingFileHandler(
        os.path.join(logs_dir, 'error.log'),
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    error_handler.setFormatter(file_formatter)
    error_handler.setLevel(logging.ERROR)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(console_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove any existing handlers
    root_logger.handlers = []

    root_logger.addHandler(all_handler)
    root_logger.addHandler(error_handler)
    root_logger.addHandler(console_handler)

    for logger_name, level in NOISY_LOGGERS.items():
        logging.getLogger(logger_name).setLevel(level)

    logger = logging.getLogger(__name__)
    logger.info('Logging setup completed')
