from typing import Optional


class ToAv1Error(Exception):
    """Base class for errors that end a to_av1 run."""


class StartupError(ToAv1Error):
    """A working directory could not be created; nothing has been touched yet."""


class TranscodeError(ToAv1Error):
    """Encoder could not be spawned or exited with a non-zero status."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class TranscodeInterrupted(ToAv1Error):
    """SIGINT/SIGTERM arrived before or during an encode."""

    def __init__(self, message: str = "Interrupted"):
        super().__init__(message)
