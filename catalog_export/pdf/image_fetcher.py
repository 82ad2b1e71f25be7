"""
Product Image Fetcher

Downloads one remote product image and converts it to an embeddable data URI.

Every failure (bad URL, timeout, HTTP error, non-image content, oversized
body, undecodable bytes) resolves to ImagePayload.absent() so a single bad
image never interrupts an export.
"""

import base64
import logging
import threading
import time
from io import BytesIO
from typing import Optional

import requests
from PIL import Image

from ..common.constants import IMAGE_FETCH_TIMEOUT, IMAGE_MAX_BYTES
from ..models import ImagePayload

logger = logging.getLogger(__name__)

# Declared content type -> format tag used by the layout engine
FORMAT_TAGS = {
    "image/png": "PNG",
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/pjpeg": "JPEG",
    "image/webp": "WEBP",
}
DEFAULT_FORMAT_TAG = "JPEG"

CHUNK_SIZE = 64 * 1024


def format_tag_for(content_type: str) -> str:
    """Normalize an image/* content type to PNG, JPEG or WEBP."""
    return FORMAT_TAGS.get(content_type, DEFAULT_FORMAT_TAG)


def to_data_uri(content: bytes, content_type: str) -> str:
    """Encode image bytes as a base64 data URI."""
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


class ImageFetcher:
    """
    Fetches product images over HTTP.

    Handles:
    - URL validation
    - Request timeout (connect/read and total download time)
    - Status and Content-Type checks
    - Payload size cap
    - Image verification with Pillow

    Usage:
        with ImageFetcher() as fetcher:
            payload = fetcher.fetch("https://cdn.example.com/soap.jpg")
            if not payload.is_absent:
                ...
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = IMAGE_FETCH_TIMEOUT,
        max_bytes: int = IMAGE_MAX_BYTES,
    ):
        """
        Initialize the fetcher.

        Without an injected session, each thread that calls fetch() gets its
        own requests.Session. An injected session is shared by all threads
        and must be safe for that.

        Args:
            session: HTTP session to use from every thread (optional)
            timeout: Seconds allowed per image
            max_bytes: Largest accepted image payload
        """
        self._shared_session = session
        self._local = threading.local()
        self._sessions = []
        self._sessions_lock = threading.Lock()
        self.timeout = timeout
        self.max_bytes = max_bytes

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    @property
    def session(self) -> requests.Session:
        """HTTP session for the calling thread."""
        if self._shared_session is not None:
            return self._shared_session

        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def close(self):
        if self._shared_session is not None:
            self._shared_session.close()

        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
            self._local = threading.local()
        for session in sessions:
            session.close()

    def fetch(self, url) -> ImagePayload:
        """
        Fetch one image.

        Args:
            url: Image URL

        Returns:
            ImagePayload with a data URI, or ImagePayload.absent()
        """
        if not isinstance(url, str) or not url.strip():
            logger.debug("Skipping image with empty or invalid URL: %r", url)
            return ImagePayload.absent()

        try:
            return self._fetch(url.strip())
        except Exception:
            logger.exception("Unexpected error fetching image: %s", url)
            return ImagePayload.absent()

    def _fetch(self, url: str) -> ImagePayload:
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
        except requests.exceptions.Timeout:
            logger.warning("Image request timed out after %ss: %s", self.timeout, url)
            return ImagePayload.absent()
        except requests.exceptions.RequestException as e:
            logger.warning("Image request failed: %s (%s)", url, e)
            return ImagePayload.absent()

        try:
            return self._read_payload(url, response)
        finally:
            response.close()

    def _read_payload(self, url: str, response) -> ImagePayload:
        if not 200 <= response.status_code < 300:
            logger.warning("Image HTTP %d: %s", response.status_code, url)
            return ImagePayload.absent()

        content_type = response.headers.get("Content-Type", "").split(";")[0].strip().lower()
        if not content_type.startswith("image/"):
            logger.warning("Not an image (Content-Type %r): %s", content_type, url)
            return ImagePayload.absent()

        declared_length = response.headers.get("Content-Length")
        if declared_length and declared_length.isdigit() and int(declared_length) > self.max_bytes:
            logger.warning("Image too large (%s bytes declared): %s", declared_length, url)
            return ImagePayload.absent()

        content = self._read_body(url, response)
        if content is None:
            return ImagePayload.absent()

        try:
            Image.open(BytesIO(content)).verify()
        except Exception as e:
            logger.warning("Image could not be decoded: %s (%s)", url, e)
            return ImagePayload.absent()

        logger.debug("Fetched image %s (%d bytes, %s)", url, len(content), content_type)
        return ImagePayload(
            data_uri=to_data_uri(content, content_type),
            format_tag=format_tag_for(content_type),
        )

    def _read_body(self, url: str, response) -> Optional[bytes]:
        """Stream the body, stopping at the size cap or the time limit."""
        started = time.monotonic()
        buffer = bytearray()

        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                buffer.extend(chunk)
                if len(buffer) > self.max_bytes:
                    logger.warning("Image too large (over %d bytes): %s", self.max_bytes, url)
                    return None
                if time.monotonic() - started > self.timeout:
                    logger.warning("Image download timed out after %ss: %s", self.timeout, url)
                    return None
        except requests.exceptions.RequestException as e:
            logger.warning("Image download interrupted: %s (%s)", url, e)
            return None

        if not buffer:
            logger.warning("Image response was empty: %s", url)
            return None

        return bytes(buffer)
