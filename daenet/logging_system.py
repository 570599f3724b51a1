# daenet/logging_system.py
"""
Structured logging for DAEnetIP relay boards.

Provides:
- Structured logging (JSON file, plain text console)
- Event classification (severity, category)
- Audit trail of relay writes
- Log rotation

Every relay write is recorded as an AUDIT event so that the sequence of
commands sent to a board can be reconstructed after the fact.
"""

import asyncio
import json
import logging
import logging.handlers
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

__all__ = [
    "EventSeverity",
    "EventCategory",
    "LogEntry",
    "ConsoleFormatter",
    "JSONFormatter",
    "DeviceLogger",
    "configure_logging",
    "get_logger",
]

# ----------------------------------------------------------------
# Event classification
# ----------------------------------------------------------------


class EventSeverity(Enum):
    """
    Event severity levels.

    Lower number = higher severity
    """

    CRITICAL = 1
    ERROR = 2
    WARNING = 3
    NOTICE = 4
    INFO = 5
    DEBUG = 6


class EventCategory(Enum):
    """Event categories."""

    AUDIT = "audit"  # Relay writes
    PROCESS = "process"  # Relay state observations
    COMMUNICATION = "communication"  # SNMP transport events
    SYSTEM = "system"  # Lifecycle/configuration


LOGGING_TO_SEVERITY = {
    logging.CRITICAL: EventSeverity.CRITICAL,
    logging.ERROR: EventSeverity.ERROR,
    logging.WARNING: EventSeverity.WARNING,
    logging.INFO: EventSeverity.INFO,
    logging.DEBUG: EventSeverity.DEBUG,
}

SEVERITY_TO_LOGGING = {
    EventSeverity.CRITICAL: logging.CRITICAL,
    EventSeverity.ERROR: logging.ERROR,
    EventSeverity.WARNING: logging.WARNING,
    EventSeverity.NOTICE: logging.INFO,
    EventSeverity.INFO: logging.INFO,
    EventSeverity.DEBUG: logging.DEBUG,
}


# ----------------------------------------------------------------
# Structured log entry
# ----------------------------------------------------------------


@dataclass
class LogEntry:
    """Structured log entry for relay board events."""

    wall_time: float
    severity: EventSeverity
    category: EventCategory
    message: str

    device: str = ""
    component: str = ""
    user: str = ""

    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    correlation_id: str = ""

    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialisation."""
        entry_dict = {
            "wall_time": self.wall_time,
            "severity": self.severity.name,
            "category": self.category.value,
            "message": self.message,
            "event_id": self.event_id,
        }

        if self.device:
            entry_dict["device"] = self.device
        if self.component:
            entry_dict["component"] = self.component
        if self.user:
            entry_dict["user"] = self.user
        if self.correlation_id:
            entry_dict["correlation_id"] = self.correlation_id
        if self.data:
            entry_dict["data"] = self.data

        return entry_dict

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def to_human_readable(self) -> str:
        severity_str = f"[{self.severity.name:8s}]"
        device_str = f"{self.device}:" if self.device else ""
        component_str = f"{self.component}:" if self.component else ""
        return f"{severity_str} {device_str}{component_str} {self.message}"


# ----------------------------------------------------------------
# Formatters
# ----------------------------------------------------------------


class ConsoleFormatter(logging.Formatter):
    """Plain text console format with wall-clock prefix."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
        )


class JSONFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def __init__(self, device: str = ""):
        super().__init__()
        self.device = device

    def format(self, record: logging.LogRecord) -> str:
        severity = LOGGING_TO_SEVERITY.get(record.levelno, EventSeverity.INFO)

        log_entry = LogEntry(
            wall_time=record.created,
            severity=severity,
            category=getattr(record, "category", EventCategory.SYSTEM),
            message=record.getMessage(),
            device=self.device,
            component=record.name,
        )

        if record.exc_info:
            log_entry.data["exception"] = self.formatException(record.exc_info)

        return log_entry.to_json()


# ----------------------------------------------------------------
# Device logger
# ----------------------------------------------------------------


class DeviceLogger:
    """
    Logger for one relay board (or one module).

    Wraps Python's logging with:
    - Structured JSON file output (optional)
    - Event classification
    - In-memory audit trail
    """

    def __init__(
        self,
        name: str,
        device: str = "",
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
        level: int = logging.INFO,
        max_audit_entries: int = 10000,
    ):
        """
        Initialise device logger.

        Args:
            name: Logger name (typically module name)
            device: Device name for context
            log_dir: Directory for log files (None = no file logging)
            enable_json: Enable JSON formatted logs (requires log_dir)
            enable_console: Enable console output
            level: Minimum level passed to handlers
            max_audit_entries: Maximum audit trail entries to retain
        """
        self.name = name
        self.device = device
        self.log_dir = log_dir

        logger_name = f"{name}.{device}" if device else name
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(level)
        self.logger.propagate = False

        self.logger.handlers.clear()

        if enable_console:
            self._add_console_handler(level)

        if enable_json and log_dir:
            self._add_json_handler(level)

        self.audit_trail: list[LogEntry] = []
        self._audit_lock = asyncio.Lock()
        self._max_audit_entries = max_audit_entries

    def _add_console_handler(self, level: int) -> None:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(ConsoleFormatter())
        self.logger.addHandler(handler)

    def _add_json_handler(self, level: int) -> None:
        """Add JSON file handler with rotation."""
        if not self.log_dir:
            return

        self.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.log_dir / f"{self.device or 'daenet'}.json.log"

        handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        handler.setLevel(level)
        handler.setFormatter(JSONFormatter(device=self.device))
        self.logger.addHandler(handler)

    # ----------------------------------------------------------------
    # Standard logging methods
    # ----------------------------------------------------------------

    def debug(self, message: str, *args, **kwargs) -> None:
        self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> None:
        self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> None:
        self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs) -> None:
        self.logger.error(message, *args, **kwargs)

    def exception(self, message: str, *args, **kwargs) -> None:
        """Log exception with traceback."""
        self.logger.exception(message, *args, **kwargs)

    # ----------------------------------------------------------------
    # Structured logging
    # ----------------------------------------------------------------

    async def log_event(
        self,
        severity: EventSeverity,
        category: EventCategory,
        message: str,
        **kwargs,
    ) -> LogEntry:
        """
        Log structured event.

        Args:
            severity: Event severity level
            category: Event category
            message: Event message
            **kwargs: Additional context (user, component, data, etc.)

        Returns:
            LogEntry that was created
        """
        device = kwargs.pop("device", self.device)

        entry = LogEntry(
            wall_time=time.time(),
            severity=severity,
            category=category,
            message=message,
            device=device,
            **kwargs,
        )

        self.logger.log(
            SEVERITY_TO_LOGGING.get(severity, logging.INFO),
            entry.to_human_readable(),
            extra={"category": category},
        )

        if category == EventCategory.AUDIT:
            async with self._audit_lock:
                self.audit_trail.append(entry)
                if len(self.audit_trail) > self._max_audit_entries:
                    self.audit_trail = self.audit_trail[-self._max_audit_entries :]

        return entry

    async def log_audit(
        self, message: str, action: str = "", result: str = "", **kwargs
    ) -> LogEntry:
        """
        Log audit trail event.

        Args:
            message: Audit message
            action: Action performed (e.g. "set_pin")
            result: Result of action (OK, FAILED)
            **kwargs: Additional context

        Returns:
            LogEntry that was created
        """
        data = dict(kwargs.pop("data", {}))
        data.update({"action": action, "result": result})

        severity = EventSeverity.NOTICE if result != "FAILED" else EventSeverity.ERROR
        return await self.log_event(
            severity=severity,
            category=EventCategory.AUDIT,
            message=message,
            data=data,
            **kwargs,
        )

    # ----------------------------------------------------------------
    # Audit trail access
    # ----------------------------------------------------------------

    async def get_audit_trail(
        self,
        limit: int = 100,
        severity: EventSeverity | None = None,
    ) -> list[LogEntry]:
        """Get audit trail entries (most recent last)."""
        async with self._audit_lock:
            entries = self.audit_trail
            if severity:
                entries = [e for e in entries if e.severity == severity]
            return entries[-limit:]

    async def clear_audit_trail(self) -> int:
        """Clear audit trail. Returns number of entries cleared."""
        async with self._audit_lock:
            count = len(self.audit_trail)
            self.audit_trail.clear()
            return count


# ----------------------------------------------------------------
# Global logger factory
# ----------------------------------------------------------------

_loggers: dict[str, DeviceLogger] = {}
_loggers_lock = threading.Lock()
_default_log_dir: Path | None = None
_default_level: int = logging.INFO


def configure_logging(
    log_dir: Path | str | None = None,
    level: int | str = logging.INFO,
) -> None:
    """
    Configure global logging settings.

    Loggers created before this call keep their handlers.

    Args:
        log_dir: Directory for JSON log files
        level: Minimum level, as int or level name ("DEBUG", "INFO", ...)
    """
    global _default_log_dir, _default_level

    if log_dir:
        _default_log_dir = Path(log_dir)
        _default_log_dir.mkdir(parents=True, exist_ok=True)
    else:
        _default_log_dir = None

    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved
    _default_level = level


def get_logger(name: str, device: str = "", **kwargs) -> DeviceLogger:
    """
    Get or create a device logger.

    Thread-safe logger factory.

    Args:
        name: Logger name (typically __name__)
        device: Device name for context
        **kwargs: Additional DeviceLogger arguments

    Returns:
        DeviceLogger instance
    """
    logger_key = f"{name}:{device}"

    with _loggers_lock:
        if logger_key not in _loggers:
            if "log_dir" not in kwargs and _default_log_dir:
                kwargs["log_dir"] = _default_log_dir
            kwargs.setdefault("level", _default_level)

            _loggers[logger_key] = DeviceLogger(name, device, **kwargs)

        return _loggers[logger_key]
