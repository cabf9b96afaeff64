import logging
from typing import Any, Dict, Tuple

# Fields attached (via `extra=`) to each event the client emits.
EVENT_FIELDS: Dict[str, Tuple[str, ...]] = {
    "sc.request": ("method", "url", "status", "attempt", "duration_ms"),
    "sc.retry": ("method", "url", "status", "attempt", "backoff_s"),
    "sc.page": ("page", "shape", "count", "url"),
    "sc.lookup": ("org_id", "count"),
}


class SiteEventFormatter(logging.Formatter):
    """
    Renders client events as `<time> <level> <logger> <event> k=v ...`.

    Known events (EVENT_FIELDS) get their fields in a fixed order; any other
    record is printed as a plain message.
    """

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{self.formatTime(record, self.datefmt)} "
            f"{record.levelname.lower():<7} {record.name} {record.getMessage()}"
        )

        fields = EVENT_FIELDS.get(record.msg) if isinstance(record.msg, str) else None
        pairs = [
            f"{key}={_quote(getattr(record, key))}"
            for key in fields or ()
            if getattr(record, key, None) is not None
        ]
        if pairs:
            line = f"{line} {' '.join(pairs)}"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _quote(val: Any) -> str:
    s = str(val)
    if not s or any(c in s for c in ' ="'):
        return '"' + s.replace('"', '\\"') + '"'
    return s


def setup_logging(level: str = "INFO") -> None:
    """Send all logging to stderr through SiteEventFormatter."""
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(SiteEventFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # httpx logs every request at INFO; the client already emits sc.request.
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["setup_logging", "SiteEventFormatter", "EVENT_FIELDS"]
