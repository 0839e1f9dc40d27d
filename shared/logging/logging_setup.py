from datetime import datetime
from pytz import timezone
import logging.config
import logging
import os
from logging import Logger


def _resolve_level() -> int:
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "info").upper())
    return level if isinstance(level, int) else logging.INFO


loglevel = _resolve_level()

_ANSI_RESET = "\033[0m"
_COLOR_MAP: dict[str, str] = {
    "cyan":    "\033[36m",
    "green":   "\033[32m",
    "yellow":  "\033[33m",
    "red":     "\033[31m",
    "magenta": "\033[35m",
    "blue":    "\033[34m",
    "white":   "\033[37m",
}
_LEVEL_PREFIX = {
    logging.CRITICAL: "⛔ ",
    logging.ERROR: "⛔ ",
    logging.WARNING: "⚠️ ",
}
_SECRET_ENV_KEYS = ("VAULT_AUTHORITY_SECRET", "VAULT_LEAF_OWNER_SECRET", "INDEXER_DAS_API_KEY")


class SecretFilter(logging.Filter):
    """Masks configured secrets (keypairs, indexer API key) in every record that passes a handler."""

    MASK = "***"

    def __init__(self, secrets: list[str]):
        super().__init__()
        self._secrets = [s for s in secrets if s]

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        if any(secret in message for secret in self._secrets):
            for secret in self._secrets:
                message = message.replace(secret, self.MASK)
            record.msg = message
            record.args = ()
        return True


class VaultFormatter(logging.Formatter):
    """Formats timestamps in ``tz_name`` and prefixes warnings and errors.

    With ``use_color`` the line is wrapped in the ANSI color named by the record's
    ``color`` attribute (set through :class:`ColorLogger`). Files get plain text.
    """

    def __init__(self, tz_name: str, use_color: bool = False, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = timezone(tz_name)
        self.use_color = use_color

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, self.tz)
        return dt.strftime(datefmt) if datefmt else dt.isoformat()

    def format(self, record) -> str:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = str(record.msg)
        # args are consumed, the parent must not interpolate again
        record.msg = _LEVEL_PREFIX.get(record.levelno, "") + message
        record.args = ()

        line = super().format(record)
        ansi = _COLOR_MAP.get(getattr(record, "color", None) or "", "") if self.use_color else ""
        return f"{ansi}{line}{_ANSI_RESET}" if ansi else line


class ColorLogger:
    """Wraps a :class:`logging.Logger` and accepts ``color=`` on the usual log methods.

    Usage::

        logger.info("Transaction sent: %s", signature, color="green")
    """

    def __init__(self, logger: Logger):
        self._logger = logger

    def _log(self, level: int, msg, args, color: str | None, kwargs: dict) -> None:
        if color is not None:
            kwargs["extra"] = {**(kwargs.get("extra") or {}), "color": color}
        self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.DEBUG, msg, args, color, kwargs)

    def info(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.INFO, msg, args, color, kwargs)

    def warning(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.WARNING, msg, args, color, kwargs)

    def error(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.ERROR, msg, args, color, kwargs)

    def exception(self, msg, *args, color: str | None = None, **kwargs):
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, args, color, kwargs)

    def __getattr__(self, name):
        return getattr(self._logger, name)


def setup_logging() -> ColorLogger:
    """Configure console and file logging for the vault harness.

    Reads ``LOG_LEVEL`` (default info), ``TIMEZONE`` (default UTC) and ``ROOT_DIR``
    (default the working directory; logs go to ``<ROOT_DIR>/logs/vault.log``).
    """
    log_dir = os.path.join(os.getenv("ROOT_DIR", os.getcwd()), "logs")
    tz_name = os.getenv("TIMEZONE", "UTC")
    os.makedirs(log_dir, exist_ok=True)

    line_format = "%(asctime)s - %(levelname)s - %(message)s"
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "secrets": {
                "()": SecretFilter,
                "secrets": [os.getenv(key, "") for key in _SECRET_ENV_KEYS],
            },
        },
        "formatters": {
            "plain": {
                "()": VaultFormatter,
                "format": line_format,
                "datefmt": "%Y-%m-%d %H:%M:%S",
                "tz_name": tz_name,
            },
            "colored": {
                "()": VaultFormatter,
                "format": line_format,
                "datefmt": "%Y-%m-%d %H:%M:%S",
                "tz_name": tz_name,
                "use_color": True,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "colored",
                "filters": ["secrets"],
                "level": loglevel,
                "stream": "ext://sys.stdout",
            },
            "file": {
                "class": "logging.FileHandler",
                "formatter": "plain",
                "filters": ["secrets"],
                "level": loglevel,
                "filename": os.path.join(log_dir, "vault.log"),
                "encoding": "utf-8",
            },
        },
        "root": {
            "handlers": ["console", "file"],
            "level": loglevel,
        },
    })

    # httpx logs full URLs, which may carry an API key
    logging.getLogger("httpx").setLevel(logging.DEBUG if loglevel <= logging.DEBUG else logging.WARNING)

    return ColorLogger(logging.getLogger("vault"))
