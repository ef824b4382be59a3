import logging
from pathlib import Path
from typing import Iterable
from toav1.config.models import PathsConfig
from toav1.domain.exceptions import StartupError
from toav1.domain.models import CandidateFile, TranscodeJob


def ensure_directories(paths: Iterable[Path]):
    """Creates each directory with parents. Any failure aborts startup."""
    for path in paths:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StartupError(f"Cannot create directory {path}: {e}") from e


class FileLifecycleManager:
    """Owns the temp -> output -> archive path layout of each file.

    Moves are plain renames. If the directories live on different filesystems
    the rename fails with EXDEV and the file is abandoned; nothing is copied.
    """

    def __init__(self, paths: PathsConfig):
        self.temp_dir = Path(paths.temp_dir).absolute()
        self.out_dir = Path(paths.out_dir).absolute()
        self.archive_dir = Path(paths.processed_dir).absolute()
        self.logger = logging.getLogger(__name__)

    @property
    def working_dirs(self):
        return [self.archive_dir, self.out_dir, self.temp_dir]

    def prepare(self):
        ensure_directories(self.working_dirs)

    def build_job(self, candidate: CandidateFile, name: str, display_height: int) -> TranscodeJob:
        return TranscodeJob(
            source_path=candidate.path,
            temp_path=self.temp_dir / name,
            output_path=self.out_dir / name,
            archive_path=self.archive_dir / candidate.path.name,
            display_height=display_height,
        )

    def publish_output(self, job: TranscodeJob):
        """Step 2: temp file -> output dir."""
        job.temp_path.replace(job.output_path)
        self.logger.info(f"MOVE_OUTPUT: {job.temp_path.name} -> {job.output_path.parent}")

    def archive_source(self, job: TranscodeJob):
        """Step 3: source -> archive dir, keeping its original name."""
        job.source_path.replace(job.archive_path)
        self.logger.info(f"MOVE_ARCHIVE: {job.source_path.name} -> {job.archive_path.parent}")
