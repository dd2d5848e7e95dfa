import logging
import logging.handlers
import os
import re
from pathlib import Path

class SensitiveDataFilter(logging.Filter):
    """
    Filter to mask access tokens in log records.
    """
    def __init__(self, name=""):
        super().__init__(name)
        self.patterns = [
            (r'(token=)[\'"]?([^\'"\s&]+)[\'"]?', r'\1***MASKED***'),
            (r'\b[0-9a-f]{64}\b', '***MASKED***'),  # bare sha-256 digests
        ]

    def filter(self, record):
        if not isinstance(record.msg, str):
            return True

        # Mask the formatted message: uvicorn passes the request path in args.
        msg = record.getMessage()
        for pattern, replacement in self.patterns:
            msg = re.sub(pattern, replacement, msg, flags=re.IGNORECASE)

        record.msg = msg
        record.args = ()
        return True

def setup_logging(log_file_path: str = None):
    """
    Configures the logging for the application.
    Writes logs to stdout and to a rotating file.
    """
    log_file = Path(log_file_path or os.environ.get("LOG_FILE_PATH", "logs/app.log"))
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    sensitive_filter = SensitiveDataFilter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(sensitive_filter)

    # Rotates when file size reaches 10MB, keeps 5 backup files
    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=10 * 1024 * 1024, backupCount=5
    )
    file_handler.setFormatter(formatter)
    file_handler.addFilter(sensitive_filter)

    root_logger = logging.getLogger()
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates if called multiple times
    root_logger.handlers = []

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("redis").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return log_file
