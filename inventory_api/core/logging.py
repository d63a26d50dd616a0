import json
import logging
from datetime import datetime, timezone
from typing import Optional

from inventory_api.config import Settings, get_settings

# Attributes the request logging middleware attaches through ``extra``.
REQUEST_CONTEXT_FIELDS = ("method", "path", "status_code", "duration_ms", "client")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, tagged with the app and any request context."""

    def __init__(self, app_name: Optional[str] = None, environment: Optional[str] = None):
        super().__init__()
        self.app_name = app_name
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.app_name:
            payload["app"] = self.app_name
        if self.environment:
            payload["environment"] = self.environment
        for field in REQUEST_CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def setup_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler()
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter(app_name=settings.APP_NAME, environment=settings.ENVIRONMENT))
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s - %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # uvicorn's access log duplicates RequestLoggingMiddleware.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
