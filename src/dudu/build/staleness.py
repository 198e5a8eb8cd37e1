"""Staleness oracle — decides whether an output is up to date.

An output is fresh only when it is provably newer than its input.  When
either side cannot be stat'ed the item is rebuilt: skipping work is only
allowed when it is known to be safe.
"""

from __future__ import annotations

import os
from pathlib import Path


def is_stale(input_path: Path, output_path: Path, force: bool = False) -> bool:
    """Return True if *output_path* must be regenerated from *input_path*.

    Stale unless the input's modification time is strictly before the
    output's.  ``force`` always yields stale.

    """
    if force:
        return True
    try:
        input_mtime = os.stat(input_path).st_mtime_ns
        output_mtime = os.stat(output_path).st_mtime_ns
    except OSError:
        return True
    return not input_mtime < output_mtime
