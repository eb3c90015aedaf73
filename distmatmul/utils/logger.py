import logging
import sys
import os

logs_env = os.getenv("LOGS")
logs_env = logs_env.strip() if logs_env else None
logs_file = os.getenv("LOGS_FILE")

if logs_env not in (None, "0", "1", "2"):
    print(f"Invalid LOGS value (logs_env={logs_env}). Use LOGS=0 to just print warnings, LOGS=1 to also print information logs or LOGS=2 to include debug logs")


class PrefixFormatter(logging.Formatter):
    def __init__(self, prefix: str = "", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.prefix = prefix

    def format(self, record: logging.LogRecord) -> str:
        # Add prefix in brackets if it exists
        if self.prefix:
            record = logging.makeLogRecord(record.__dict__)
            record.msg = f"[{self.prefix}] {record.getMessage()}"
            record.args = None
        return super().format(record)


_level_override: int | None = None
_console_handlers: dict[str, logging.Handler] = {}


def _level_from_env() -> int:
    if _level_override is not None: return _level_override
    if logs_env == "0": return logging.WARNING
    if logs_env == "2": return logging.DEBUG
    return logging.INFO


def create_logger(name: str, prefix: str = "") -> logging.Logger:
    """
    {prefix} is shown in brackets before every message (e.g. "W2" for worker 2).
    Loggers are cached by name, so a prefixed logger should use a distinct name.
    """
    logger = logging.getLogger(name)
    if not logger.hasHandlers():
        level = _level_from_env()
        logger.setLevel(level)

        formatter = PrefixFormatter(
            prefix=prefix,
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)
        _console_handlers[name] = console_handler

        if logs_file:
            file_handler = logging.FileHandler(logs_file)
            # Log everything to file
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def set_console_level(level: int) -> None:
    """Applies {level} to every logger created by create_logger, including the ones created later"""
    global _level_override
    _level_override = level
    for name, console_handler in _console_handlers.items():
        logging.getLogger(name).setLevel(level)
        console_handler.setLevel(level)
