"""Side effects that follow a spoken reply."""

import logging
import webbrowser

logger = logging.getLogger(__name__)


def open_in_browser(url: str) -> bool:
    """
    Open a URL in a new browser tab.

    Returns:
        False if no browser accepted the URL
    """
    try:
        return webbrowser.open_new_tab(url)
    except webbrowser.Error as e:
        logger.warning("No usable browser for %s: %s", url, e)
        return False
