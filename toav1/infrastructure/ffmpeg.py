import logging
import shlex
import time
from pathlib import Path
from typing import Callable, List, Optional
from rich.console import Console
from toav1.config.models import EncoderConfig
from toav1.domain.exceptions import TranscodeError, TranscodeInterrupted
from toav1.domain.models import TranscodeJob
from toav1.infrastructure.process_runner import InterruptScope, SubprocessRunner


def affinity_range(threads: int) -> str:
    """taskset CPU list covering CPUs 0..threads-1."""
    if threads < 1:
        raise ValueError(f"threads must be >= 1, got {threads}")
    return f"0-{threads - 1}"


def build_command(config: EncoderConfig, threads: int, input_path: Path, output_path: Path) -> List[str]:
    """Constructs the taskset + ffmpeg command line. Pure: no I/O."""
    cmd = [
        "taskset",
        "-c", affinity_range(threads),
        "ffmpeg",
        "-y",
        "-i", str(input_path),
        "-map", "0:v",
        "-map", "0:a",
        "-map", "0:s?",  # optional: sources without subtitles must not fail
    ]

    if config.cap_height:
        cmd.extend(["-vf", f"scale=-1:'min({config.max_height},ih)'"])

    cmd.extend([
        "-c:v", "libsvtav1",
        "-svtav1-params", config.svtav1_params,
        "-preset", str(config.preset),
        "-crf", str(config.crf),
        "-pix_fmt", "yuv420p10le",
        "-c:a", "copy",
        "-c:s", "copy",
        str(output_path),
    ])
    return cmd


class FFmpegAdapter:
    """Runs one SVT-AV1 encode on the terminal and supervises it.

    Any non-clean outcome is fatal for the run and is raised, never retried.
    """

    def __init__(
        self,
        runner: Optional[SubprocessRunner] = None,
        console: Optional[Console] = None,
        interrupt_scope: Callable[[], InterruptScope] = InterruptScope,
    ):
        self.runner = runner or SubprocessRunner()
        self.console = console or Console()
        self.interrupt_scope = interrupt_scope
        self.logger = logging.getLogger(__name__)

    def _echo(self, cmd: List[str]):
        self.console.rule(style="dim")
        self.console.print(shlex.join(cmd), markup=False, highlight=False, soft_wrap=True)
        self.console.print()

    def transcode(self, job: TranscodeJob, config: EncoderConfig, threads: int):
        """Encodes job.source_path into job.temp_path.

        Raises:
            TranscodeInterrupted: SIGINT/SIGTERM arrived before or during the encode.
            TranscodeError: ffmpeg/taskset could not start or exited non-zero.
        """
        cmd = build_command(config, threads, job.source_path, job.temp_path)
        filename = job.source_path.name

        self._echo(cmd)
        self.logger.info(f"TRANSCODE_START: {filename} -> {job.temp_path}")
        self.logger.debug(f"TRANSCODE_CMD: {shlex.join(cmd)}")
        start_time = time.monotonic()

        with self.interrupt_scope() as cancel_event:
            try:
                outcome = self.runner.run_attached(cmd, cancel_event)
            except OSError as e:
                self.logger.error(f"TRANSCODE_SPAWN_FAILED: {filename}: {e}")
                raise TranscodeError(f"ffmpeg error:\n{e}") from e

        elapsed = time.monotonic() - start_time
        if outcome.cancelled:
            self.logger.warning(f"TRANSCODE_INTERRUPTED: {filename} elapsed={elapsed:.2f}s")
            raise TranscodeInterrupted()
        if outcome.returncode != 0:
            self.logger.error(
                f"TRANSCODE_FAILED: {filename} code={outcome.returncode} elapsed={elapsed:.2f}s"
            )
            raise TranscodeError(
                f"ffmpeg error:\nexit status {outcome.returncode}",
                returncode=outcome.returncode,
            )
        self.logger.info(f"TRANSCODE_END: {filename} elapsed={elapsed:.2f}s")
