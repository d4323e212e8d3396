from datetime import datetime
from pathlib import Path


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def find_latest_payload(directory: Path, prefix: str) -> Path | None:
    """
    Returns the most recently modified '<prefix>*.json' file in the directory,
    or None when there is none.
    """
    if not directory.exists():
        return None
    candidates = [p for p in directory.glob(f"{prefix}*.json") if p.is_file()]
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.stat().st_mtime)
