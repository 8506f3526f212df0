"""
Download the published timetable workbook into the local data folder.

The file is cached: an existing download is reused unless refresh=True.
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from termplan.errors import WorkbookError

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
RAW_DIR = PACKAGE_DIR / "data" / "raw"


def default_workbook_path() -> Path:
    """
    Location of the cached timetable workbook inside the package.
    """
    return RAW_DIR / "timetable.xlsx"


def download_workbook(
    url: str,
    dest: str | Path | None = None,
    refresh: bool = False,
    timeout: float = 30,
) -> Path:
    """
    Fetch `url` and store it at `dest`. Returns the path of the workbook.
    """
    out_file = Path(dest) if dest is not None else default_workbook_path()

    if out_file.exists() and not refresh:
        logger.info("SKIP  %s (already downloaded)", out_file)
        return out_file

    logger.info("FETCH %s", url)
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise WorkbookError(f"Download failed: {exc}", url) from exc

    if not resp.content:
        raise WorkbookError("Downloaded file is empty", url)

    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_bytes(resp.content)
    return out_file
