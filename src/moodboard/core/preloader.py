"""Off-screen image preloading.

:class:`ImagePreloader` fetches one image and decodes it before handing it
back, so the board only ever receives images that are ready to draw.

Fetch and decode are treated differently:

- **Fetch** failures (transport errors, non-2xx responses, empty bodies)
  raise :class:`~moodboard.core.errors.LoadError`.  There is exactly one
  attempt; nothing is retried.
- **Decode** is an optimisation.  When decoding is disabled or Pillow cannot
  read the bytes, the image is returned undecoded rather than failing.

Decoding runs in a worker thread so a batch of large images does not stall
the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO

import httpx
from PIL import Image

from moodboard.core.errors import DecodeError, LoadError
from moodboard.core.sources import ImageRequest

logger = logging.getLogger(__name__)


@dataclass
class ImageElement:
    """Renderable handle for one fetched image.

    Attributes:
        data: Raw response body.
        content_type: Response media type.
        image: Decoded Pillow image, or ``None`` when decoding was skipped
            or failed.
        alt: Alternative text; empty because board images are decorative.
        loading: Loading hint passed on to renderers.
    """

    data: bytes
    content_type: str = "application/octet-stream"
    image: Image.Image | None = None
    alt: str = ""
    loading: str = "lazy"

    @property
    def decoded(self) -> bool:
        return self.image is not None

    @property
    def size(self) -> tuple[int, int] | None:
        """Decoded pixel size as ``(width, height)``, or ``None`` if undecoded."""
        if self.image is None:
            return None
        return self.image.size

    def close(self) -> None:
        """Release the decoded pixel buffer, if any."""
        if self.image is not None:
            self.image.close()
            self.image = None


@dataclass(frozen=True)
class PreloadedImage:
    """A request together with its fetched element."""

    request: ImageRequest
    element: ImageElement


def decode_image(data: bytes) -> Image.Image:
    """Decode *data* fully into memory.

    ``Image.open`` is lazy, so ``load()`` forces the pixel data to be read
    and validated here rather than at first draw.
    """
    image = Image.open(BytesIO(data))
    image.load()
    return image


class ImagePreloader:
    """Fetches and decodes single images.

    Args:
        client: Shared HTTP client; its connection pool bounds concurrency.
        decode: Whether to decode images before resolving.
    """

    def __init__(self, client: httpx.AsyncClient, decode: bool = True) -> None:
        self._client = client
        self._decode = decode

    async def preload(self, request: ImageRequest) -> PreloadedImage:
        """Fetch and decode the image described by *request*.

        Args:
            request: Image to fetch.

        Returns:
            The preloaded image, decoded when possible.

        Raises:
            LoadError: If the image could not be fetched.
        """
        data, content_type = await self._fetch(request)
        element = ImageElement(data=data, content_type=content_type)

        if self._decode:
            try:
                element.image = await self._decode_element(request, data)
            except DecodeError as e:
                logger.debug(f"{e}; using undecoded image")

        return PreloadedImage(request=request, element=element)

    async def _fetch(self, request: ImageRequest) -> tuple[bytes, str]:
        try:
            response = await self._client.get(request.url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise LoadError(request, str(e) or type(e).__name__) from e

        if not response.content:
            raise LoadError(request, "empty response body")

        content_type = response.headers.get("content-type", "application/octet-stream")
        return response.content, content_type

    async def _decode_element(self, request: ImageRequest, data: bytes) -> Image.Image:
        try:
            return await asyncio.to_thread(decode_image, data)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(request, str(e)) from e
