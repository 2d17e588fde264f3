"""
Logging configuration using Loguru.

Features:
- Console lines prefixed with wall-clock time (HH:MM:SS)
- Banner lines without the time prefix via `logger.bind(plain=True)`
- JSON serialization for the rotating file log
- Correlation IDs via context binding
"""

from loguru import logger
import sys
from pathlib import Path


def _console_format(record) -> str:
    if record["extra"].get("plain"):
        return "{message}\n{exception}"
    return "<green>{time:HH:mm:ss}</green> => {message}\n{exception}"


def setup_logging(run_id: str = None, category: str = None, verbose: bool = False,
                  log_dir: Path = Path("data/logs")):
    """
    Configure Loguru logger with console and file handlers.

    Args:
        run_id: Unique run identifier for correlation
        category: Catalog category - one log file per category
        verbose: If True, set console level to DEBUG
        log_dir: Directory for the rotating JSON log

    Returns:
        Configured logger with context bindings
    """
    # Remove default handler
    logger.remove()

    console_level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stdout,
        level=console_level,
        format=_console_format,
        colorize=True,
    )

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = f"{category}.log" if category else "app.log"

    logger.add(
        log_dir / log_file,
        level="DEBUG",
        format="{time} {level} {message}",
        rotation="10 MB",
        retention="30 days",
        serialize=True,
        enqueue=True,
    )

    return logger.bind(run_id=run_id or "unknown", category=category or "unknown")


def log_banner(*lines: str):
    """Log a block of lines framed by separators, without time prefix."""
    separator = "#" * 55
    body = "\n".join(f"  {line}" for line in lines)
    logger.bind(plain=True).info(f"{separator}\n{body}\n{separator}")
