"""Region capture through KDE Spectacle.

Spectacle is driven as a command-line tool. On Plasma this is more reliable
than the portal, which on some Plasma versions opens the full Spectacle
window instead of a region picker.
"""

import subprocess
import tempfile
import threading
import uuid
from pathlib import Path

from .. import log
from ..errors import BackendFailed, UserCancelled
from .base import RasterImage, load_image_file

logger = log.get_logger()

SPECTACLE_BINARY = "spectacle"

# -b: background (no GUI), -n: no notification, -r: region mode, -o: output file
SPECTACLE_ARGS = ("-b", "-n", "-r", "-o")


class SpectacleCapture:
    """Captures a user-drawn region by running `spectacle -b -n -r -o <file>`."""

    def __init__(self, binary: str = SPECTACLE_BINARY, temp_dir: str | None = None):
        self._binary = binary
        self._temp_dir = Path(temp_dir or tempfile.gettempdir())
        self._process: subprocess.Popen | None = None
        self._lock = threading.Lock()
        self._cancelled = False

    def _temp_path(self) -> Path:
        return self._temp_dir / f"capture_{uuid.uuid4().hex[:12]}.png"

    def capture(self) -> RasterImage:
        """Run Spectacle in region mode and wait for it to exit.

        Raises:
            BackendFailed: Spectacle is missing, exited non-zero or wrote no file.
            UserCancelled: cancel() was called while Spectacle was running.
        """
        output_path = self._temp_path()
        command = [self._binary, *SPECTACLE_ARGS, str(output_path)]
        logger.debug("starting spectacle", output=str(output_path))

        try:
            with self._lock:
                if self._cancelled:
                    raise UserCancelled("capture cancelled before spectacle started")
                process = subprocess.Popen(
                    command,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.PIPE,
                )
                self._process = process
            _, stderr = process.communicate()
            returncode = process.returncode
        except OSError as e:
            raise BackendFailed(f"could not run {self._binary}: {e}") from e
        finally:
            with self._lock:
                self._process = None

        if self._cancelled:
            output_path.unlink(missing_ok=True)
            raise UserCancelled("capture cancelled")

        if returncode != 0:
            output_path.unlink(missing_ok=True)
            message = (stderr or b"").decode(errors="replace").strip()
            logger.warning("spectacle failed", returncode=returncode, stderr=message)
            raise BackendFailed(f"spectacle exited with status {returncode}")

        return load_image_file(output_path, delete=True)

    def cancel(self) -> None:
        """Terminate a running Spectacle process."""
        with self._lock:
            self._cancelled = True
            if self._process is not None and self._process.poll() is None:
                logger.debug("terminating spectacle")
                self._process.terminate()
