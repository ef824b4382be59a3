from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, model_validator

UNKNOWN = -1


class Resolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = UNKNOWN
    height: int = UNKNOWN


class ProbeResult(BaseModel):
    resolution: Resolution = Resolution()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CandidateFile(BaseModel):
    path: Path
    mtime_ns: int


class TranscodeJob(BaseModel):
    """Paths for one file's encode and three-stage move."""

    source_path: Path
    temp_path: Path
    output_path: Path
    archive_path: Path
    display_height: int

    @model_validator(mode="after")
    def validate_distinct_paths(self):
        paths = [self.source_path, self.temp_path, self.output_path, self.archive_path]
        if len(set(paths)) != len(paths):
            raise ValueError(
                "source, temp, output and archive paths must be distinct "
                f"(got {[str(p) for p in paths]})"
            )
        return self

    @property
    def output_name(self) -> str:
        return self.output_path.name


class RunSummary(BaseModel):
    discovered: int = 0
    completed: int = 0
    abandoned: int = 0
