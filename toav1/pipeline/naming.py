"""Display-height decision and output file naming.

Both functions are pure so the only branching policy of the pipeline can be
tested without spawning ffprobe.
"""

from pathlib import Path
from typing import Tuple
from toav1.config.models import EncoderConfig
from toav1.domain.models import UNKNOWN, ProbeResult

OUTPUT_SUFFIX = " [AV1 10bit].mkv"


def decide_display_height(probe: ProbeResult, config: EncoderConfig) -> Tuple[int, bool]:
    """Returns (display_height, used_unknown).

    | probe   | cap on | height                  |
    |---------|--------|-------------------------|
    | success | yes    | min(cap, probed height) |
    | success | no     | probed height           |
    | failure | yes    | cap                     |
    | failure | no     | UNKNOWN                 |

    A probe that ran but produced no usable height counts as a failure, so a
    capped run always labels with a real height and never "(-1p)".
    """
    height = probe.resolution.height
    probed = probe.ok and height >= 0

    if config.cap_height:
        if probed:
            return min(config.max_height, height), False
        return config.max_height, False

    if probed:
        return height, False
    return UNKNOWN, True


def output_name(source: Path, display_height: int, config: EncoderConfig) -> str:
    """Builds "<stem> (<height>p) [AV1 10bit].mkv"; the height label only appears when capping."""
    name = source.stem
    if config.cap_height:
        name += f" ({display_height}p)"
    return name + OUTPUT_SUFFIX
