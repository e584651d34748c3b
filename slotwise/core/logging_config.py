# slotwise/core/logging_config.py
import json
import logging
import sys
from datetime import datetime, timezone

from slotwise.core.config import Settings, get_settings

_configured = False


class JSONFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging(settings: Settings | None = None) -> None:
    """
    Configure the root logger once for the whole process.

    Modules never configure handlers themselves; they only call
    `logging.getLogger(__name__)`.
    """
    global _configured
    if _configured:
        return

    if settings is None:
        settings = get_settings()

    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_JSON:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.LOG_LEVEL.upper())

    # SQLAlchemy echoes every statement at INFO; keep it quiet unless asked.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True
