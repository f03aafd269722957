"""
Icon loading for zone overlays.

Icons may be local file paths or http(s) URLs. Decoding keeps the native
channel count (alpha included) so the compositor can blend them.
"""

import logging
import re
from typing import Optional

import numpy as np
import cv2
import requests

from ..utils.config import SETTINGS


logger = logging.getLogger(__name__)

_REMOTE_URI = re.compile(
    r"^(?:((?:https?):)\/\/)([^:\/\s]+)(?::(\d*))?(?:\/([^\s?#]+)?([?][^?#]*)?(#.*)?)?$"
)


def is_remote_uri(uri: str) -> bool:
    """Check whether uri is an http(s) locator."""
    return bool(uri) and _REMOTE_URI.match(uri) is not None


def resize_icon(icon: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resize an icon to the zone size with cubic interpolation."""
    return cv2.resize(icon, (width, height), interpolation=cv2.INTER_CUBIC)


class IconLoader:
    """Loads icons from disk or over HTTP; failures return None."""

    def __init__(self, timeout: Optional[float] = None, session: Optional[requests.Session] = None):
        """
        Args:
            timeout: HTTP timeout in seconds (default: SETTINGS.icon_timeout)
            session: Optional requests session (shared connection pool)
        """
        self.timeout = timeout if timeout is not None else SETTINGS.icon_timeout
        self._session = session or requests.Session()

    def load(self, uri: str) -> Optional[np.ndarray]:
        """
        Load and decode an icon.

        Returns:
            Decoded image with native channels, or None if unavailable
        """
        if not uri:
            return None

        icon = cv2.imread(uri, cv2.IMREAD_UNCHANGED)
        if icon is not None:
            logger.debug(f"Loaded icon {uri} | shape={icon.shape}")
            return icon

        if not is_remote_uri(uri):
            logger.warning(f"Icon not found or undecodable: {uri}")
            return None

        return self._fetch(uri)

    def _fetch(self, uri: str) -> Optional[np.ndarray]:
        try:
            response = self._session.get(uri, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Failed to fetch icon {uri}: {e}")
            return None

        data = np.frombuffer(response.content, dtype=np.uint8)
        if data.size == 0:
            logger.warning(f"Empty icon response from {uri}")
            return None

        icon = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
        if icon is None:
            logger.warning(f"Could not decode icon fetched from {uri}")
            return None

        logger.info(f"Fetched icon {uri} | shape={icon.shape} bytes={data.size}")
        return icon

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> 'IconLoader':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
