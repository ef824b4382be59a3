"""Run log for to_av1.

The orchestrator reports through the EventBus; `attach_event_log` turns
those events into tagged log lines so the log reads as a per-file history.
"""

import logging
from pathlib import Path
from typing import Optional
from toav1.domain.events import (
    DiscoveryFinished, JobStarted, JobCompleted, MoveFailed, ProcessingFinished
)
from toav1.infrastructure.event_bus import EventBus

LOG_FILE_NAME = "to_av1.log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
PACKAGE_LOGGER = "toav1"


def resolve_log_file(log_dir: Path, log_path: Optional[Path] = None) -> Path:
    """An explicit log_path wins; otherwise the log lives in log_dir."""
    return Path(log_path) if log_path else Path(log_dir) / LOG_FILE_NAME


def setup_logging(log_dir: Path, debug: bool = False, log_path: Optional[Path] = None) -> logging.Logger:
    """Attaches a file handler to the package logger and returns it.

    Calling it again replaces the previous handler, so a second run in the
    same process never writes to two files.
    """
    log_file = resolve_log_file(log_dir, log_path)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    logger.info(f"Logging initialized: {log_file} (debug={'ON' if debug else 'OFF'})")
    return logger


def attach_event_log(event_bus: EventBus, logger: Optional[logging.Logger] = None) -> logging.Logger:
    """Subscribes log writers for every pipeline event."""
    logger = logger or logging.getLogger(f"{PACKAGE_LOGGER}.events")

    @event_bus.subscribe(DiscoveryFinished)
    def _discovery(event: DiscoveryFinished):
        logger.info(
            f"Discovery finished: dir={event.directory} pattern={event.pattern} "
            f"found={event.files_found}"
        )

    @event_bus.subscribe(JobStarted)
    def _started(event: JobStarted):
        logger.info(f"JOB_START: {event.job.source_path.name} (height={event.job.display_height})")

    @event_bus.subscribe(JobCompleted)
    def _completed(event: JobCompleted):
        logger.info(f"JOB_COMPLETED: {event.job.source_path.name} -> {event.job.output_name}")

    @event_bus.subscribe(MoveFailed)
    def _move_failed(event: MoveFailed):
        logger.warning(
            f"MOVE_FAILED: {event.job.source_path.name} stage={event.stage}: {event.error_message}"
        )

    @event_bus.subscribe(ProcessingFinished)
    def _finished(event: ProcessingFinished):
        logger.info(f"Processing finished: completed={event.completed} abandoned={event.abandoned}")

    return logger
