"""Publish the status line as the X root window name, which dwm draws."""

from Xlib import display as xdisplay


class RootWindowPublisher:
    """Equivalent of ``xsetroot -name``, holding one connection for its lifetime."""

    def __init__(self, display: xdisplay.Display | None = None) -> None:
        """
        Initialize the RootWindowPublisher.

        Args:
            display: An open X display. Defaults to connecting to $DISPLAY.
        """
        self._display = display if display is not None else xdisplay.Display()
        self._root = self._display.screen().root

    def publish(self, status: str) -> None:
        """Store ``status`` as WM_NAME of the root window and flush."""
        # dwm decodes WM_NAME as UTF-8 even when typed STRING
        self._root.set_wm_name(status.encode("utf-8"))
        self._display.sync()

    def close(self) -> None:
        """Close the display connection."""
        self._display.close()
