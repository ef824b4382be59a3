import glob
import os
import stat
from pathlib import Path
from typing import List
from toav1.domain.models import CandidateFile


class FileScanner:
    """Globs the scan directory and orders matches oldest first."""

    def __init__(self, pattern: str):
        self.pattern = pattern

    def scan(self, scan_dir: Path) -> List[CandidateFile]:
        """Returns regular files matching the pattern, sorted by mtime ascending.

        Entries that vanish or cannot be stat'ed between glob and stat are
        dropped. Files with equal mtimes keep glob order. The scan directory is
        taken literally and dotfiles match wildcards.
        """
        candidates = []
        pattern = os.path.join(glob.escape(str(scan_dir)), self.pattern)
        for match in glob.glob(pattern, include_hidden=True):
            path = Path(os.path.abspath(match))
            try:
                st = path.stat()
            except OSError:
                continue
            if not stat.S_ISREG(st.st_mode):
                continue
            candidates.append(CandidateFile(path=path, mtime_ns=st.st_mtime_ns))

        return sorted(candidates, key=lambda c: c.mtime_ns)
