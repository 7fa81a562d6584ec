"""Region capture through the xdg-desktop-portal Screenshot interface.

This is the standard path on Wayland (GNOME, Sway with a portal backend,
etc.). It uses:
- dbus-python to call org.freedesktop.portal.Screenshot
- a GLib main loop in the calling thread to wait for the Request.Response
  signal, which only arrives once the user has drawn a region or cancelled

The portal saves the selection to a file and returns its URI.
"""

import re
import threading
import uuid
from pathlib import Path
from urllib.parse import unquote, urlparse

from .. import log
from ..errors import BackendFailed, EnvironmentUnsupported, UserCancelled
from .base import RasterImage, load_image_file

logger = log.get_logger()

PORTAL_BUS_NAME = "org.freedesktop.portal.Desktop"
PORTAL_OBJECT_PATH = "/org/freedesktop/portal/desktop"
SCREENSHOT_INTERFACE = "org.freedesktop.portal.Screenshot"
REQUEST_INTERFACE = "org.freedesktop.portal.Request"

# Request.Response codes
RESPONSE_SUCCESS = 0
RESPONSE_CANCELLED = 1

# Lazy imports for optional dependencies
_dbus = None
_GLib = None


def _ensure_imports() -> bool:
    """Lazily import dbus and GLib, installing the GLib main loop for dbus."""
    global _dbus, _GLib

    if _dbus is not None:
        return True

    try:
        import dbus
        import gi  # noqa: F401
        from dbus.mainloop.glib import DBusGMainLoop
        from gi.repository import GLib

        DBusGMainLoop(set_as_default=True)

        _dbus = dbus
        _GLib = GLib
        return True
    except ImportError as e:
        logger.warning("portal capture dependencies not available", err=str(e))
        return False


def request_path(sender: str, token: str) -> str:
    """Object path the portal will use for a request with this token.

    Args:
        sender: Our unique bus name, e.g. ":1.42".
        token: The handle_token passed in the call options.
    """
    sender_name = re.sub(r"\.", "_", sender.lstrip(":"))
    return f"{PORTAL_OBJECT_PATH}/request/{sender_name}/{token}"


def uri_to_path(uri: str) -> Path:
    """Convert the portal's file:// URI to a local path.

    Raises:
        BackendFailed: The URI is not a local file URI.
    """
    parsed = urlparse(str(uri))
    if parsed.scheme != "file":
        raise BackendFailed(f"portal returned a non-file URI: {uri}")
    return Path(unquote(parsed.path))


def handle_response(response: int, results: dict, keep_file: bool = False) -> RasterImage:
    """Turn a Request.Response signal into an image or a capture error."""
    if response == RESPONSE_CANCELLED:
        logger.info("user cancelled region selection")
        raise UserCancelled("region selection cancelled")
    if response != RESPONSE_SUCCESS:
        raise BackendFailed(f"portal screenshot failed with response {response}")

    uri = results.get("uri")
    if not uri:
        raise BackendFailed("portal response did not contain a URI")

    return load_image_file(uri_to_path(str(uri)), delete=not keep_file)


class PortalCapture:
    """Captures a user-drawn region via the Screenshot portal."""

    def __init__(self, keep_file: bool = False):
        """Initialize the portal capture handler.

        Args:
            keep_file: Leave the portal's screenshot file on disk. The portal
                usually writes into ~/Pictures, so it is removed by default.
        """
        self._keep_file = keep_file
        self._loop = None
        self._lock = threading.Lock()
        self._cancelled = False

    def _new_token(self) -> str:
        """Generate a unique token for portal requests."""
        return f"t{uuid.uuid4().hex[:8]}"

    def _connect(self):
        if not _ensure_imports():
            raise EnvironmentUnsupported("dbus-python and PyGObject are required for portal capture")
        try:
            bus = _dbus.SessionBus()
            portal = bus.get_object(PORTAL_BUS_NAME, PORTAL_OBJECT_PATH)
        except _dbus.exceptions.DBusException as e:
            raise EnvironmentUnsupported(f"screenshot portal not reachable: {e}") from e
        return bus, portal

    def capture(self) -> RasterImage:
        """Ask the portal for an interactive screenshot and wait for the user.

        Raises:
            UserCancelled: The user dismissed the selection, or cancel() was called.
            BackendFailed: The portal reported an error or returned no file.
            EnvironmentUnsupported: No session bus or no portal service.
        """
        bus, portal = self._connect()
        token = self._new_token()
        expected_path = request_path(bus.get_unique_name(), token)
        outcome: dict = {}
        loop = _GLib.MainLoop()

        def on_response(response, results):
            outcome["response"] = int(response)
            outcome["results"] = dict(results)
            loop.quit()

        # Subscribe before calling so a fast response cannot be missed
        receivers = [
            bus.add_signal_receiver(
                on_response, "Response", REQUEST_INTERFACE, PORTAL_BUS_NAME, expected_path
            )
        ]

        with self._lock:
            if self._cancelled:
                receivers[0].remove()
                raise UserCancelled("capture cancelled")
            self._loop = loop

        try:
            options = {"handle_token": token, "interactive": True}
            handle = portal.Screenshot("", options, dbus_interface=SCREENSHOT_INTERFACE)
            logger.debug("portal screenshot requested", handle=str(handle))

            # Portals older than 0.9 ignore handle_token
            if str(handle) != expected_path:
                receivers.append(
                    bus.add_signal_receiver(
                        on_response, "Response", REQUEST_INTERFACE, PORTAL_BUS_NAME, str(handle)
                    )
                )

            loop.run()
        except _dbus.exceptions.DBusException as e:
            raise BackendFailed(f"portal screenshot call failed: {e}") from e
        finally:
            with self._lock:
                self._loop = None
            for receiver in receivers:
                receiver.remove()

        if "response" not in outcome:
            raise UserCancelled("capture cancelled")

        return handle_response(outcome["response"], outcome["results"], keep_file=self._keep_file)

    def cancel(self) -> None:
        """Stop waiting for the portal. The pending capture raises UserCancelled."""
        with self._lock:
            self._cancelled = True
            if self._loop is not None:
                _GLib.idle_add(self._loop.quit)
