"""Opening the authorization URL in the user's browser."""

import logging
import webbrowser

from .errors import BrowserError

logger = logging.getLogger(__name__)


def open_url_browser(url: str) -> None:
    """
    Ask the operating system to open ``url`` in the default browser.

    Raises:
        BrowserError: If no browser could be launched.
    """
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        raise BrowserError(f"Browser launch failed: {e}") from e
    if not opened:
        raise BrowserError("Couldn't launch a browser automatically")
    logger.debug("Browser launched for authorization URL")
