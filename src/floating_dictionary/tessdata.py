"""Tesseract language data location.

Bundled *.traineddata files are copied once into the user's data directory
(~/.local/share/floating-dictionary-linux/tessdata by default) and
TESSDATA_PREFIX is pointed at it, so Tesseract finds the models no matter
where the package was installed from.
"""

import os
import shutil
from pathlib import Path

from . import log
from .backends.ocr.tesseract import reset_language_cache

logger = log.get_logger()

APP_DATA_NAME = "floating-dictionary-linux"


def get_data_dir() -> Path:
    """User data directory for this application (XDG_DATA_HOME aware)."""
    base = os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return Path(base) / APP_DATA_NAME


def extract_bundle(bundle_dir: Path, target_dir: Path) -> int:
    """Copy *.traineddata files from bundle_dir into target_dir.

    Files already present are left alone.

    Returns:
        Number of files copied.
    """
    target_dir.mkdir(parents=True, exist_ok=True)
    copied = 0
    for source in sorted(bundle_dir.glob("*.traineddata")):
        destination = target_dir / source.name
        if destination.exists():
            continue
        shutil.copyfile(source, destination)
        copied += 1
    return copied


def setup_tessdata(tessdata_dir: str | None = None, bundle_dir: str | None = None) -> Path | None:
    """Point Tesseract at the right language data.

    Args:
        tessdata_dir: Explicit directory with *.traineddata files. Wins over
            everything else.
        bundle_dir: Directory of bundled models to extract into the user
            data directory.

    Returns:
        The directory TESSDATA_PREFIX now points to, or None when Tesseract's
        own default is used.
    """
    if tessdata_dir:
        path = Path(tessdata_dir).expanduser()
    elif bundle_dir:
        path = get_data_dir() / "tessdata"
        copied = extract_bundle(Path(bundle_dir).expanduser(), path)
        if copied:
            logger.info("extracted tesseract models", count=copied, path=str(path))
    else:
        logger.debug("using default tessdata", prefix=os.environ.get("TESSDATA_PREFIX", ""))
        return None

    os.environ["TESSDATA_PREFIX"] = str(path)
    reset_language_cache()
    logger.debug("tessdata configured", path=str(path))
    return path
