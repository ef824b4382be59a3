import logging
from pathlib import Path
from typing import List, Optional
from toav1.domain.models import UNKNOWN, ProbeResult, Resolution
from toav1.infrastructure.process_runner import SubprocessRunner


class FFprobeAdapter:
    """Wrapper around ffprobe to read the first video stream's resolution."""

    def __init__(self, runner: Optional[SubprocessRunner] = None):
        self.runner = runner or SubprocessRunner()
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def build_command(file_path: Path) -> List[str]:
        return [
            "ffprobe",
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=width,height",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(file_path),
        ]

    @staticmethod
    def parse_output(output: str) -> List[int]:
        """Parses one integer per non-empty line; unparseable lines become UNKNOWN."""
        values = []
        for line in output.split("\n"):
            if not line:
                continue
            try:
                values.append(int(line.strip()))
            except ValueError:
                values.append(UNKNOWN)
        return values

    def probe(self, file_path: Path) -> ProbeResult:
        """Probes width and height. Never raises; failures come back in .error."""
        cmd = self.build_command(file_path)
        try:
            result = self.runner.capture(cmd)
        except OSError as e:
            self.logger.debug(f"PROBE_SPAWN_FAILED: {file_path.name}: {e}")
            return ProbeResult(error=f"ffprobe could not be started: {e}")

        if result.returncode != 0:
            output = (result.stdout or "").strip()
            return ProbeResult(
                error=f"ffprobe exited with code {result.returncode} for {file_path}: {output}"
            )

        values = self.parse_output(result.stdout or "")
        values += [UNKNOWN] * (2 - len(values))
        return ProbeResult(resolution=Resolution(width=values[0], height=values[1]))
