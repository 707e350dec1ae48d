import contextvars
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any

# Lead payloads carry contact details; nothing that identifies a person may
# reach the log stream in clear text.
_PATTERNS = (
    (re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"), "[REDACTED_EMAIL]"),
    # 07700 900000, +44 7700 900000, 0800 048 5737, (020) 7946 0000
    (
        re.compile(r"(?<![\w.])(?:\+44\s?|0)(?:\(?\d{2,5}\)?[\s-]?){1,3}\d{3,6}(?![\w.])"),
        "[REDACTED_PHONE]",
    ),
    (re.compile(r"\b[A-Z]{1,2}\d[A-Z\d]?\s*\d[A-Z]{2}\b", re.IGNORECASE), "[REDACTED_POSTCODE]"),
    (re.compile(r"(?i)\bbearer\s+\S+"), "Bearer [REDACTED_TOKEN]"),
    (re.compile(r"(?i)\b(token|secret|signature|sig)=[^&\s]+"), r"\1=[REDACTED_TOKEN]"),
)
CONTACT_FIELDS = frozenset({"name", "phone", "email", "postcode", "notes", "message"})
SECRET_FIELDS = frozenset({"authorization", "metrics_token", "token", "secret"})

_request_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar(
    "boiler_leads_request_context", default=None
)
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def redact_pii(text: str) -> str:
    for pattern, replacement in _PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def _scrub(value: Any, key: str | None = None) -> Any:
    if key is not None and key.lower() in CONTACT_FIELDS | SECRET_FIELDS:
        return "[REDACTED]"
    if isinstance(value, str):
        return redact_pii(value)
    if isinstance(value, dict):
        return {item_key: _scrub(item, item_key) for item_key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_scrub(item) for item in value]
    return value


def bind_request_context(**fields: Any) -> None:
    """Attach fields to every log line emitted while the current request runs."""
    current = _request_context.get() or {}
    _request_context.set({**current, **{key: value for key, value in fields.items() if value is not None}})


def reset_request_context() -> None:
    _request_context.set(None)


def _structured_fields(record: logging.LogRecord) -> dict[str, Any]:
    fields = {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }
    nested = fields.pop("extra", None)
    if isinstance(nested, dict):
        fields.update(nested)
    return fields


class JsonLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_pii(record.getMessage()),
        }
        line.update(_scrub(_request_context.get() or {}))
        line.update(_scrub(_structured_fields(record)))
        if record.exc_info and record.exc_info[0] is not None:
            line["exc_type"] = record.exc_info[0].__name__
        return json.dumps(line, ensure_ascii=False, default=str)


def configure_logging(level: int = logging.INFO) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonLogFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
