import logging
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Optional, Union
from zoneinfo import ZoneInfo


class LoggerMixin:
    """
    Mixin giving a class a named logger and structured log helpers.

    Messages may be plain strings or event dictionaries, e.g.::

        class VisitService(LoggerMixin):
            async def add(self, patient_id):
                self.log_info({"event": "visit_added", "patient_id": str(patient_id)})
    """

    _logger: Optional[logging.Logger] = None

    @property
    def logger(self) -> logging.Logger:
        if self._logger is None:
            self._logger = logging.getLogger(f"app.{self.__class__.__name__}")
        return self._logger

    @staticmethod
    def _format_message(message: Union[str, Dict[str, Any]]) -> str:
        if isinstance(message, dict):
            return " ".join(f"{key}={value}" for key, value in message.items())
        return message

    def log_info(self, message: Union[str, Dict[str, Any]], **kwargs) -> None:
        self.logger.info(self._format_message(message), **kwargs)

    def log_warning(self, message: Union[str, Dict[str, Any]], **kwargs) -> None:
        self.logger.warning(self._format_message(message), **kwargs)

    def log_error(
        self, message: Union[str, Dict[str, Any]], exc_info: bool = False, **kwargs
    ) -> None:
        """
        Log an error level message.

        Args:
            message: Message to log (string or dict)
            exc_info: Attach the active exception's traceback if True
        """
        self.logger.error(self._format_message(message), exc_info=exc_info, **kwargs)

    def log_debug(self, message: Union[str, Dict[str, Any]], **kwargs) -> None:
        self.logger.debug(self._format_message(message), **kwargs)


class _ModuleLevelLogger(LoggerMixin):
    """Logger for module-level functions (routes, actions)."""

    def __init__(self):
        self._logger = logging.getLogger("app.logger")


logger = _ModuleLevelLogger()


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the ``app`` logger hierarchy."""
    app_logger = logging.getLogger("app")
    if not app_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )
        app_logger.addHandler(handler)
    app_logger.setLevel(level.upper())


# ============= Time helpers =============
# Timestamps are stored as naive UTC so they compare the same way on every backend.

def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_local_day(now: datetime, tz_name: str) -> datetime:
    """
    Return the UTC instant (naive) at which the local calendar day
    containing ``now`` began.

    Args:
        now: Naive UTC timestamp
        tz_name: IANA timezone name defining "local"
    """
    tz = ZoneInfo(tz_name)
    local_now = now.replace(tzinfo=timezone.utc).astimezone(tz)
    local_midnight = datetime.combine(local_now.date(), time.min, tzinfo=tz)
    return local_midnight.astimezone(timezone.utc).replace(tzinfo=None)


def local_day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """Naive UTC ``[start, end)`` range covering a local calendar day."""
    tz = ZoneInfo(tz_name)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(date.fromordinal(day.toordinal() + 1), time.min, tzinfo=tz)
    return (
        start.astimezone(timezone.utc).replace(tzinfo=None),
        end.astimezone(timezone.utc).replace(tzinfo=None),
    )
