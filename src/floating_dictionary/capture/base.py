"""Types shared by the region capture backends."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .. import log
from ..errors import BackendFailed
from .convert import BGRAFrame, pil_to_bgra

logger = log.get_logger()


@dataclass(frozen=True)
class Region:
    """Pixel rectangle on screen."""

    x: int
    y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass
class RasterImage:
    """Captured pixels, owned by the pipeline until OCR has consumed them."""

    pixels: BGRAFrame
    pixel_format: str = "BGRA"

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


class RegionCapture(Protocol):
    """Lets the user draw a rectangle and returns its pixels.

    Both SpectacleCapture and PortalCapture conform to this protocol.
    """

    def capture(self) -> RasterImage:
        """Block until the user has selected a region.

        Raises:
            UserCancelled: The user dismissed the selection.
            BackendFailed: The backend failed or produced no image.
            EnvironmentUnsupported: The backend cannot run here at all.
        """
        ...

    def cancel(self) -> None:
        """Abort a pending capture from another thread."""
        ...


def load_image_file(path: Path, delete: bool = True) -> RasterImage:
    """Decode a screenshot file into a RasterImage.

    Args:
        path: PNG (or any Pillow-readable) file written by the backend.
        delete: Remove the file once decoded.

    Raises:
        BackendFailed: The file is missing, empty or not an image.
    """
    from PIL import Image, UnidentifiedImageError

    if not path.exists() or path.stat().st_size == 0:
        raise BackendFailed(f"capture produced no image at {path}")

    try:
        with Image.open(path) as image:
            image.load()
            pixels = pil_to_bgra(image)
    except (OSError, UnidentifiedImageError) as e:
        raise BackendFailed(f"could not decode {path}: {e}") from e
    finally:
        if delete:
            try:
                os.remove(path)
            except OSError as e:
                logger.warning("failed to remove screenshot", path=str(path), err=str(e))

    logger.debug("screenshot decoded", width=pixels.shape[1], height=pixels.shape[0])
    return RasterImage(pixels=pixels)


def estimate_region(pointer: tuple[int, int] | None, width: int, height: int) -> Region:
    """Guess where on screen the captured rectangle was.

    Neither Spectacle nor the portal report coordinates. When the selection
    ends, the pointer rests on the corner where the drag was released, which
    for the usual top-left to bottom-right drag is the bottom-right corner.

    Args:
        pointer: Pointer position at completion, or None if unknown.
        width: Image width in pixels.
        height: Image height in pixels.
    """
    if pointer is None:
        return Region(0, 0, width, height)
    px, py = pointer
    return Region(max(0, px - width), max(0, py - height), width, height)
