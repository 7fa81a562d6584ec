"""Screen region capture.

Picks a screenshot backend for the running desktop and returns the pixels of
a rectangle the user draws:

- KDE Plasma with Spectacle installed: Spectacle in background region mode
- anything else: the xdg-desktop-portal Screenshot interface
"""

import os
import shutil
from collections.abc import Callable, Mapping
from enum import Enum

from .. import log
from .base import RasterImage, Region, RegionCapture, estimate_region
from .portal import PortalCapture
from .spectacle import SPECTACLE_BINARY, SpectacleCapture

logger = log.get_logger()


class CaptureBackend(Enum):
    """Screenshot mechanisms this tool can drive."""

    PLASMA_SPECTACLE = "plasma-spectacle"
    FREEDESKTOP_PORTAL = "freedesktop-portal"


def is_plasma_session(environ: Mapping[str, str] | None = None) -> bool:
    """Check environment variables for a running KDE Plasma session."""
    env = os.environ if environ is None else environ

    desktops = env.get("XDG_CURRENT_DESKTOP", "").upper().split(":")
    if "KDE" in desktops:
        return True
    if env.get("KDE_FULL_SESSION", "").lower() == "true":
        return True
    return "plasma" in env.get("DESKTOP_SESSION", "").lower()


def detect(
    environ: Mapping[str, str] | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> CaptureBackend:
    """Decide which screenshot backend to use.

    Plasma sessions use Spectacle when it is on PATH; every other case falls
    back to the portal. Whether the portal is actually reachable is only
    found out when capturing.

    Args:
        environ: Environment to inspect (defaults to os.environ).
        which: PATH lookup, replaceable for tests.
    """
    if is_plasma_session(environ) and which(SPECTACLE_BINARY):
        backend = CaptureBackend.PLASMA_SPECTACLE
    else:
        backend = CaptureBackend.FREEDESKTOP_PORTAL
    logger.debug("capture backend selected", backend=backend.value)
    return backend


def get_capture(backend: CaptureBackend, keep_screenshots: bool = False) -> RegionCapture:
    """Create the capture implementation for a backend token."""
    if backend is CaptureBackend.PLASMA_SPECTACLE:
        return SpectacleCapture()
    return PortalCapture(keep_file=keep_screenshots)


def capture_region(backend: CaptureBackend, keep_screenshots: bool = False) -> RasterImage:
    """Let the user draw a rectangle with the given backend and return its pixels.

    Raises:
        UserCancelled, BackendFailed, EnvironmentUnsupported
    """
    return get_capture(backend, keep_screenshots).capture()


__all__ = [
    "CaptureBackend",
    "RasterImage",
    "Region",
    "RegionCapture",
    "capture_region",
    "detect",
    "estimate_region",
    "get_capture",
    "is_plasma_session",
]
