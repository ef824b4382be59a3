import math
import os
import sys
from pathlib import Path

PROC_STAT = Path("/proc/stat")
DEFAULT_THREAD_SHARE = 0.70


def count_cpus(proc_stat: Path = PROC_STAT) -> int:
    """Counts logical CPUs.

    On Linux the per-CPU "cpuN" lines of /proc/stat are counted, which reflects
    the CPUs taskset can address. Elsewhere os.cpu_count() is used.
    """
    if not sys.platform.startswith("linux"):
        return os.cpu_count() or 1

    with open(proc_stat, "r") as f:
        lines = f.read().splitlines()

    if not lines:
        raise RuntimeError(f"failure during scanning of {proc_stat}")

    # First line is the aggregate "cpu " entry.
    count = sum(1 for line in lines[1:] if line.startswith("cpu") and line[3:4].isdigit())
    return count or (os.cpu_count() or 1)


def default_threads(cpu_count: int) -> int:
    return max(1, math.trunc(DEFAULT_THREAD_SHARE * cpu_count))


def effective_threads(requested: int, cpu_count: int) -> int:
    """Clamps the requested affinity size to the CPUs that exist."""
    return max(1, min(cpu_count, requested))
