"""Structured logging configuration using loguru."""

import sys
from pathlib import Path

from loguru import logger

from ..config.schemas import LoggingConfig


def setup_logging(
    level: str = "INFO",
    format_type: str = "pretty",
    file_path: str | None = None,
    max_file_size_mb: int = 100,
    backup_count: int = 5,
    include_stage: bool = True,
    include_run_id: bool = True,
    include_timestamps: bool = True,
) -> None:
    """Set up structured logging configuration.

    Invalid logging level names fall back to 'INFO'.
    """
    logger.remove()
    # Unbound records still render the stage/run_id columns.
    logger.configure(extra={"stage": "-", "run_id": "-"})

    format_parts = []

    if include_timestamps:
        format_parts.append("<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>")

    format_parts.append("<level>{level: <8}</level>")

    if include_stage:
        format_parts.append("<cyan>{extra[stage]: <12}</cyan>")

    if include_run_id:
        format_parts.append("<magenta>{extra[run_id]: <8}</magenta>")

    format_parts.append("<level>{message}</level>")

    if format_type == "json":
        log_format = "{message}"
        serialize = True
    else:
        log_format = " | ".join(format_parts)
        serialize = False

    try:
        logger.level(level)
        safe_level = level
    except ValueError:
        safe_level = "INFO"

    logger.add(
        sys.stdout,
        level=safe_level,
        format=log_format,
        serialize=serialize,
        colorize=format_type != "json",
    )

    if file_path:
        log_file_path = Path(file_path)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file_path,
            level=safe_level,
            format=log_format,
            serialize=serialize,
            rotation=f"{max_file_size_mb} MB",
            retention=backup_count,
            encoding="utf-8",
        )

    if safe_level != level:
        logger.warning(f"Invalid logging level '{level}' provided; falling back to 'INFO'")


def configure_logging_from_config(config: LoggingConfig | None = None) -> None:
    """Configure logging using the current configuration."""
    if config is None:
        from ..config.loader import get_config

        config = get_config().logging

    setup_logging(
        level=config.level,
        format_type=config.format,
        file_path=config.file_path,
        max_file_size_mb=config.max_file_size_mb,
        backup_count=config.backup_count,
        include_stage=config.include_stage,
        include_run_id=config.include_run_id,
        include_timestamps=config.include_timestamps,
    )


class LogContext:
    """Context manager yielding a logger bound to a stage and run id."""

    def __init__(self, stage: str | None = None, run_id: str | None = None):
        """Initialize log context.

        Args:
            stage: Engine stage name (e.g. "validation", "relationships")
            run_id: Run identifier, usually the upload id
        """
        self.stage = stage
        self.run_id = run_id

    def __enter__(self):
        """Return a logger bound to the stage and run id."""
        extra = {}
        if self.stage:
            extra["stage"] = self.stage
        if self.run_id:
            extra["run_id"] = self.run_id

        if extra:
            return logger.bind(**extra)
        return logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        return None
