import json, logging, os, sys
from datetime import datetime, timezone

# Fields the envelope modules pass via ``extra=``
ENVELOPE_FIELDS = ("did", "action", "key_id")


class JsonFormatter(logging.Formatter):
    def __init__(self, fields=ENVELOPE_FIELDS):
        super().__init__()
        self.fields = tuple(fields)

    def format(self, record):
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(
            (k, getattr(record, k)) for k in self.fields
            if getattr(record, k, None) is not None
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level=None):
    """Send JSON logs to stderr, and to DID_ENVELOPE_LOG_FILE when set.

    An explicit ``level`` wins over DID_ENVELOPE_LOG_LEVEL (default WARNING).
    """
    formatter = JsonFormatter()
    handlers = [logging.StreamHandler(sys.stderr)]

    log_file = os.getenv("DID_ENVELOPE_LOG_FILE")
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a"))

    for handler in handlers:
        handler.setFormatter(formatter)

    root = logging.getLogger()
    log_level = (level or os.getenv("DID_ENVELOPE_LOG_LEVEL", "WARNING")).upper()
    root.setLevel(getattr(logging, log_level, logging.WARNING))
    root.handlers = handlers
