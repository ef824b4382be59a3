"""Domain events for the transcode pipeline.

Events flow through the EventBus so the orchestrator stays decoupled from
console reporting and logging subscribers.

See `infrastructure/event_bus.py` for the pub/sub mechanism.
"""

from pathlib import Path
from pydantic import BaseModel
from .models import TranscodeJob


class Event(BaseModel):
    """Base class for all domain events."""

    pass


class JobEvent(Event):
    """Base class for events related to a specific transcode job."""

    job: TranscodeJob


class DiscoveryFinished(Event):
    """Emitted after the input directory has been globbed and sorted."""

    directory: Path
    pattern: str
    files_found: int


class JobStarted(JobEvent):
    """Emitted right before the encoder is launched."""

    pass


class JobCompleted(JobEvent):
    """Emitted when the output and the archived source are both in place."""

    pass


class MoveFailed(JobEvent):
    """Emitted when a post-encode move fails; the file is abandoned.

    stage is "output" (temp -> output dir) or "archive" (source -> archive dir).
    """

    stage: str
    error_message: str


class ProcessingFinished(Event):
    """Emitted after the last candidate has been handled."""

    completed: int = 0
    abandoned: int = 0
