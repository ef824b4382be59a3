"""Sequential transcode pipeline.

For each discovered file, oldest first:
probe -> decide display height -> build job -> encode into temp dir ->
move output -> archive source.

Encode failures and interrupts propagate and end the run. Move failures
abandon only the current file; whatever is already on disk stays there for
manual reconciliation.
"""

import logging
from pathlib import Path
from typing import Optional
from pydantic import ValidationError
from rich.console import Console
from toav1.config.models import AppConfig
from toav1.domain.events import (
    DiscoveryFinished, JobStarted, JobCompleted, MoveFailed, ProcessingFinished
)
from toav1.domain.models import CandidateFile, RunSummary, TranscodeJob
from toav1.infrastructure.event_bus import EventBus
from toav1.infrastructure.ffmpeg import FFmpegAdapter
from toav1.infrastructure.ffprobe import FFprobeAdapter
from toav1.infrastructure.file_scanner import FileScanner
from toav1.pipeline.lifecycle import FileLifecycleManager
from toav1.pipeline.naming import decide_display_height, output_name

DONE_BANNER = "\n[AV1] Done!"


class Orchestrator:
    """Runs the per-file pipeline over one discovery pass.

    Args:
        config: AppConfig for the whole run.
        event_bus: EventBus for job lifecycle events.
        file_scanner: FileScanner configured with the input pattern.
        ffprobe_adapter: FFprobeAdapter for the resolution probe.
        ffmpeg_adapter: FFmpegAdapter that runs and supervises the encode.
        lifecycle: FileLifecycleManager owning the temp/output/archive dirs.
        threads: Effective CPU affinity size passed to taskset.
        console: Console for the completion banner.
    """

    def __init__(
        self,
        config: AppConfig,
        event_bus: EventBus,
        file_scanner: FileScanner,
        ffprobe_adapter: FFprobeAdapter,
        ffmpeg_adapter: FFmpegAdapter,
        lifecycle: FileLifecycleManager,
        threads: int,
        console: Optional[Console] = None,
    ):
        self.config = config
        self.event_bus = event_bus
        self.file_scanner = file_scanner
        self.ffprobe_adapter = ffprobe_adapter
        self.ffmpeg_adapter = ffmpeg_adapter
        self.lifecycle = lifecycle
        self.threads = threads
        self.console = console or Console()
        self.logger = logging.getLogger(__name__)

    def _build_job(self, candidate: CandidateFile) -> TranscodeJob:
        encoder = self.config.encoder
        filename = candidate.path.name

        probe = self.ffprobe_adapter.probe(candidate.path)
        if not probe.ok:
            self.logger.warning(f"PROBE_FAILED: {filename}: {probe.error}")
        else:
            self.logger.debug(
                f"PROBE_OK: {filename} {probe.resolution.width}x{probe.resolution.height}"
            )

        display_height, used_unknown = decide_display_height(probe, encoder)
        if used_unknown:
            self.logger.info(f"HEIGHT_UNKNOWN: {filename} (cap disabled, no label)")

        name = output_name(candidate.path, display_height, encoder)
        return self.lifecycle.build_job(candidate, name, display_height)

    def _abandon(self, job: TranscodeJob, stage: str, error: Exception) -> bool:
        self.event_bus.publish(MoveFailed(job=job, stage=stage, error_message=str(error)))
        return False

    def _process_file(self, candidate: CandidateFile) -> bool:
        """Returns True when the output and the archived source are both in place."""
        try:
            job = self._build_job(candidate)
        except ValidationError as e:
            self.logger.warning(f"JOB_SKIPPED: {candidate.path.name}: {e}")
            return False

        self.event_bus.publish(JobStarted(job=job))
        # TranscodeError / TranscodeInterrupted end the run here.
        self.ffmpeg_adapter.transcode(job, self.config.encoder, self.threads)

        try:
            self.lifecycle.publish_output(job)
        except OSError as e:
            return self._abandon(job, "output", e)

        try:
            self.lifecycle.archive_source(job)
        except OSError as e:
            return self._abandon(job, "archive", e)

        self.event_bus.publish(JobCompleted(job=job))
        return True

    def run(self) -> RunSummary:
        self.lifecycle.prepare()

        scan_dir = Path(self.config.paths.input_dir)
        candidates = self.file_scanner.scan(scan_dir)
        self.event_bus.publish(DiscoveryFinished(
            directory=scan_dir.absolute(),
            pattern=self.config.paths.pattern,
            files_found=len(candidates),
        ))

        summary = RunSummary(discovered=len(candidates))
        for candidate in candidates:
            if self._process_file(candidate):
                summary.completed += 1
            else:
                summary.abandoned += 1

        self.event_bus.publish(
            ProcessingFinished(completed=summary.completed, abandoned=summary.abandoned)
        )
        self.console.print(DONE_BANNER, markup=False, highlight=False)
        return summary
