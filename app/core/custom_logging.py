"""Project logging: coloured console, rotating file, async wrapper, redaction."""

import asyncio
import inspect
import logging
import logging.handlers
import os
import re
import sys
import time
from collections.abc import Awaitable
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from functools import wraps
from pathlib import Path
from typing import Any
from typing import ClassVar
from typing import TypeVar

from colorama import Fore
from colorama import Style
from colorama import just_fix_windows_console

just_fix_windows_console()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_FILE_NAME = os.getenv("LOG_FILE", "app.log")
LOG_FILE_SIZE_MB = int(os.getenv("LOG_FILE_SIZE_MB", "10"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

logger = logging.getLogger("coach_api")
async_logger = None  # set by configure_logging()

_logging_configured = False


class ColoredFormatter(logging.Formatter):
    """A logging formatter that adds colors to the output based on the log level."""

    COLOR_CODES: ClassVar[dict[int, str]] = {
        logging.DEBUG: f"{Fore.YELLOW}",
        logging.INFO: f"{Fore.GREEN}",
        logging.WARNING: f"{Fore.BLUE}",
        logging.ERROR: f"{Fore.RED}",
        logging.CRITICAL: f"{Fore.RED}{Style.BRIGHT}",
    }
    RESET: ClassVar[str] = Style.RESET_ALL

    def format(self, record: logging.LogRecord) -> str:
        color_code = self.COLOR_CODES.get(record.levelno, self.RESET)
        message = super().format(record)
        return f"{color_code}{message}{self.RESET}"


class CleanFormatter(logging.Formatter):
    """A logging formatter that removes ANSI escape codes from the output."""

    ANSI_REGEX: ClassVar[re.Pattern[str]] = re.compile(r"\x1b\[[0-9;]*m")

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        return self.ANSI_REGEX.sub("", message)


class SensitiveDataFilter(logging.Filter):
    """
    Masks password values in log records.

    Handles ``password=...`` / ``password: ...`` fragments as produced by
    pydantic reprs and f-strings, and quoted JSON-style pairs. Field names
    containing "password" (``hashed_password``, ``newPassword``) are covered
    as well.
    """

    MASK: ClassVar[str] = "********"
    PATTERNS: ClassVar[list[re.Pattern[str]]] = [
        re.compile(r"""(?i)(["']?\w*password\w*["']?\s*[:=]\s*)(["'])(?:\\.|(?!\2).)*\2"""),
        re.compile(r"""(?i)(\b\w*password\w*\s*[:=]\s*)(?!["'])([^\s,)}\]]+)"""),
    ]

    def redact(self, message: str) -> str:
        message = self.PATTERNS[0].sub(rf"\1\2{self.MASK}\2", message)
        return self.PATTERNS[1].sub(rf"\1{self.MASK}", message)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def configure_logging(
    log_level: str = LOG_LEVEL,
    log_dir: str = LOG_DIR,
    log_file_name: str = LOG_FILE_NAME,
    log_file_size_mb: int = LOG_FILE_SIZE_MB,
    log_backup_count: int = LOG_BACKUP_COUNT,
) -> None:
    """
    Configures the project logger with console and rotating file handlers.

    Args:
        log_level: The logging level (e.g., "DEBUG", "INFO", "WARNING").
        log_dir: The directory where log files will be stored.
        log_file_name: The name of the log file.
        log_file_size_mb: The maximum size of each log file in megabytes.
        log_backup_count: The number of backup log files to keep.
    """
    global async_logger
    global _logging_configured

    if _logging_configured:
        return

    log_level = log_level.upper()
    numeric_level = getattr(logging, log_level, None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    logger.setLevel(numeric_level)
    logger.addFilter(SensitiveDataFilter())

    console_formatter = ColoredFormatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )
    file_formatter = CleanFormatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    log_file_path = Path(log_dir) / log_file_name
    try:
        log_file_path.parent.mkdir(parents=True, exist_ok=True)
        rotating_file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=log_file_size_mb * 1024 * 1024,
            backupCount=log_backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        logger.error(f"File logging disabled, cannot open {log_file_path}: {e}")
    else:
        rotating_file_handler.setFormatter(file_formatter)
        logger.addHandler(rotating_file_handler)

    async_logger = AsyncLogger(logger)
    logger.info(f"Logging configured to level {log_level} ({log_file_path})")
    _logging_configured = True


class AsyncLogger:
    """Asynchronous logger that wraps a standard logger and executes log calls in a thread pool."""

    def __init__(self, logger: logging.Logger, max_workers: int = 1):
        self._logger = logger
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="AsyncLogger"
        )

    async def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                self._executor, lambda: self._logger.log(level, msg, *args, **kwargs)
            )
        except RuntimeError as e:
            sys.stderr.write(f"Error during asynchronous logging: {e}\n")

    async def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        await self._log(logging.DEBUG, msg, *args, **kwargs)

    async def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        await self._log(logging.INFO, msg, *args, **kwargs)

    async def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        await self._log(logging.WARNING, msg, *args, **kwargs)

    async def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        await self._log(logging.ERROR, msg, *args, **kwargs)

    def shutdown(self, wait: bool = True) -> None:
        """Shuts down the thread pool executor."""
        self._executor.shutdown(wait=wait)


T = TypeVar("T", bound=Awaitable[Any])


def log_execution(
    level: int = logging.INFO,
    track_time: bool = True,
    show_args: bool = False,
    expected: tuple[type[Exception], ...] = (),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    A decorator that logs the start, finish and failure of an async function.

    Args:
        level: The logging level for start/finish records.
        track_time: Whether to log the execution time.
        show_args: Whether to include positional arguments in the log.
        expected: Exception types the caller handles as normal outcomes. They
            are logged at WARNING instead of ERROR.
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            frame = inspect.currentframe()
            try:
                if frame and frame.f_back:
                    filename = Path(frame.f_back.f_code.co_filename).name
                    lineno = frame.f_back.f_lineno
                else:
                    filename, lineno = "unknown", 0
            finally:
                del frame

            func_name = func.__qualname__
            arg_string = f"({', '.join(map(repr, args))})" if show_args else ""

            logger.log(level, f"START {filename}:{lineno} - {func_name}{arg_string}")

            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed_time = time.perf_counter() - start_time
                logger.log(
                    logging.WARNING if isinstance(e, expected) else logging.ERROR,
                    f"FAILED {filename}:{lineno} - {func_name}{arg_string} "
                    f"after {elapsed_time:.4f}s: {e!s}",
                )
                raise

            if track_time:
                elapsed_time = time.perf_counter() - start_time
                logger.log(
                    level,
                    f"FINISH {filename}:{lineno} - {func_name}{arg_string} "
                    f"in {elapsed_time:.4f}s",
                )
            return result

        return wrapper

    return decorator
