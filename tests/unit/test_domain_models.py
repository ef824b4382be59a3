import pytest
from pathlib import Path
from pydantic import ValidationError
from toav1.domain.models import UNKNOWN, ProbeResult, Resolution, TranscodeJob

def test_resolution_defaults_to_unknown():
    res = Resolution()
    assert res.width == UNKNOWN
    assert res.height == UNKNOWN

def test_probe_result_ok():
    assert ProbeResult(resolution=Resolution(width=1, height=1)).ok
    failed = ProbeResult(error="boom")
    assert not failed.ok
    assert failed.resolution == Resolution()

def test_transcode_job_paths_must_be_distinct():
    with pytest.raises(ValidationError):
        TranscodeJob(
            source_path=Path("/in/a.mp4"),
            temp_path=Path("/tmp/a.mkv"),
            output_path=Path("/tmp/a.mkv"),
            archive_path=Path("/done/a.mp4"),
            display_height=720,
        )

def test_transcode_job_output_name():
    job = TranscodeJob(
        source_path=Path("/in/a.mp4"),
        temp_path=Path("/tmp/a (720p) [AV1 10bit].mkv"),
        output_path=Path("/out/a (720p) [AV1 10bit].mkv"),
        archive_path=Path("/done/a.mp4"),
        display_height=720,
    )
    assert job.output_name == "a (720p) [AV1 10bit].mkv"
