from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SVTAV1_PARAMS = "keyint=10s:fast-decode=2"


def _validate_glob_pattern(pattern: str) -> str:
    """Rejects patterns that glob would silently treat as literals."""
    if not pattern.strip():
        raise ValueError("pattern must not be empty")
    depth = 0
    for ch in pattern:
        if ch == "[":
            depth += 1
        elif ch == "]" and depth:
            depth -= 1
    if depth:
        raise ValueError(f"Malformed pattern {pattern!r}: unterminated character class")
    return pattern


class EncoderConfig(BaseModel):
    """SVT-AV1 encode settings shared by every file in a run."""
    model_config = ConfigDict(frozen=True)

    crf: int = Field(default=32, ge=0, le=63)
    preset: int = Field(default=4, ge=-1, le=13)
    max_height: int = Field(default=1440, gt=0)
    cap_height: bool = True  # False disables the scale filter and the "(NNNp)" label
    svtav1_params: str = DEFAULT_SVTAV1_PARAMS
    threads: Optional[int] = Field(default=None, gt=0)  # None = 70% of logical CPUs


class PathsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern: str = "*.mp4"
    input_dir: str = "./"
    processed_dir: str = "./_processed"
    out_dir: str = "./_out"
    temp_dir: str = "./_temp"

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        return _validate_glob_pattern(v)


class GeneralConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    log_path: Optional[str] = None  # None = <temp_dir>/to_av1.log
    debug: bool = False


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    encoder: EncoderConfig = Field(default_factory=EncoderConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    general: GeneralConfig = Field(default_factory=GeneralConfig)
