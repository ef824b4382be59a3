import os
import subprocess
import pytest
import yaml
from pathlib import Path
from typing import Dict, List, Optional
from toav1.config.models import AppConfig, EncoderConfig, PathsConfig
from toav1.domain.models import ProbeResult, Resolution, TranscodeJob
from toav1.infrastructure.event_bus import EventBus
from toav1.infrastructure.process_runner import RunOutcome

# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def encoder_config():
    """Encoder settings matching the CLI defaults."""
    return EncoderConfig(
        crf=32,
        preset=4,
        max_height=1440,
        cap_height=True,
        svtav1_params="keyint=10s:fast-decode=2",
        threads=4,
    )

@pytest.fixture
def workdirs(tmp_path):
    """Creates an input dir; the three working dirs are left for the pipeline to create."""
    dirs = {
        "input": tmp_path / "input",
        "processed": tmp_path / "_processed",
        "out": tmp_path / "_out",
        "temp": tmp_path / "_temp",
    }
    dirs["input"].mkdir()
    return dirs

@pytest.fixture
def app_config(encoder_config, workdirs):
    return AppConfig(
        encoder=encoder_config,
        paths=PathsConfig(
            pattern="*.mp4",
            input_dir=str(workdirs["input"]),
            processed_dir=str(workdirs["processed"]),
            out_dir=str(workdirs["out"]),
            temp_dir=str(workdirs["temp"]),
        ),
    )

@pytest.fixture
def config_yaml_path(tmp_path):
    """Creates a temporary YAML config file."""
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    conf_file = conf_dir / "to_av1.yaml"

    content = {
        'encoder': {
            'crf': 28,
            'preset': 6,
            'max_height': 1080,
            'cap_height': True,
            'threads': 2,
        },
        'paths': {
            'pattern': '*.mkv',
            'input_dir': str(tmp_path / "videos"),
        },
        'general': {
            'debug': False,
        },
    }

    with open(conf_file, 'w') as f:
        yaml.dump(content, f)

    return conf_file

# ============================================================================
# EventBus Fixtures
# ============================================================================

@pytest.fixture
def event_bus():
    """Returns a fresh EventBus instance."""
    return EventBus()

# ============================================================================
# Fake process / adapter doubles
# ============================================================================

class FakeRunner:
    """Stands in for SubprocessRunner; records every command."""

    def __init__(self, stdout: str = "", returncode: int = 0, spawn_error: Optional[OSError] = None,
                 outcome: Optional[RunOutcome] = None):
        self.stdout = stdout
        self.returncode = returncode
        self.spawn_error = spawn_error
        self.outcome = outcome or RunOutcome(returncode=0)
        self.captured: List[List[str]] = []
        self.attached: List[List[str]] = []

    def capture(self, cmd):
        self.captured.append(cmd)
        if self.spawn_error:
            raise self.spawn_error
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=self.stdout)

    def run_attached(self, cmd, cancel_event):
        self.attached.append(cmd)
        if self.spawn_error:
            raise self.spawn_error
        return self.outcome


class FakeProber:
    """Returns canned probe results keyed by file name; unknown names fail."""

    def __init__(self, resolutions: Dict[str, tuple]):
        self.resolutions = resolutions
        self.probed: List[str] = []

    def probe(self, path: Path) -> ProbeResult:
        self.probed.append(path.name)
        if path.name not in self.resolutions:
            return ProbeResult(error=f"ffprobe exited with code 1 for {path}")
        width, height = self.resolutions[path.name]
        return ProbeResult(resolution=Resolution(width=width, height=height))


class FakeTranscoder:
    """Writes a small file at the job's temp path instead of running ffmpeg."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.jobs: List[TranscodeJob] = []

    def transcode(self, job: TranscodeJob, config, threads):
        self.jobs.append(job)
        if self.error:
            raise self.error
        job.temp_path.write_bytes(b"av1 " + job.source_path.name.encode())


@pytest.fixture
def fake_runner():
    return FakeRunner()

# ============================================================================
# File System Helpers
# ============================================================================

def make_video(directory: Path, name: str, mtime: float) -> Path:
    """Creates a dummy source file with a fixed modification time."""
    path = directory / name
    path.write_bytes(b"dummy video content " * 10)
    os.utime(path, (mtime, mtime))
    return path


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
