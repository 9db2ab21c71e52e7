# richdiff/richdiff/crash.py
from __future__ import annotations
import os
import tempfile
from datetime import datetime
from typing import Iterable, Optional


def write_crash_log(lines: Iterable[str], directory: Optional[str] = None) -> str:
    """Write one diagnostic per line to richdiff_crash_<timestamp>.log and return its path."""
    directory = directory or tempfile.gettempdir()
    os.makedirs(directory, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    path = os.path.join(directory, f"richdiff_crash_{ts}.log")
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(str(x) for x in lines))
        f.write("\n")
    return path
