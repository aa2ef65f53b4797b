"""Download Tesseract language data.

Fetches ``*.traineddata`` files from the tessdata_fast repository into a
directory that can be passed as ``--tessdata-dir`` or ``TESSDATA_PREFIX``.
"""

from __future__ import annotations

import logging
import urllib.request
from pathlib import Path
from typing import Iterable


logger = logging.getLogger(__name__)

TESSDATA_FAST_BASE = "https://raw.githubusercontent.com/tesseract-ocr/tessdata_fast/main"
DEFAULT_LANGS = ["eng", "deu", "fra", "ita"]


def _download(url: str) -> bytes:
    with urllib.request.urlopen(url, timeout=60) as resp:
        return resp.read()


def download_tessdata(langs: Iterable[str], dest: Path) -> list[Path]:
    """Download each language into ``dest``; existing non-empty files are kept.

    Returns:
        Paths of every requested traineddata file, downloaded or not.
    """
    dest.mkdir(parents=True, exist_ok=True)
    paths: list[Path] = []

    for lang in langs:
        target = dest / f"{lang}.traineddata"
        paths.append(target)
        if target.exists() and target.stat().st_size > 0:
            logger.info("[INFO] Skip %s: already exists (%d bytes)", lang, target.stat().st_size)
            continue

        url = f"{TESSDATA_FAST_BASE}/{lang}.traineddata"
        logger.info("[INFO] Download %s: %s", lang, url)
        data = _download(url)
        tmp = target.with_suffix(target.suffix + ".tmp")
        tmp.write_bytes(data)
        tmp.replace(target)
        logger.info("[INFO] Saved %s (%d bytes)", target, target.stat().st_size)

    return paths


def looks_like_tessdata_dir(path: Path) -> bool:
    """True when ``path`` is a directory holding at least one traineddata file."""
    if not path.is_dir():
        return False
    return any(path.glob("*.traineddata"))
