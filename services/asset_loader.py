"""
Asset loader for the Suffah school document pipeline
Fetches logos and photos for the generators; failures degrade to None
"""

import asyncio
import base64
import logging
import os
from io import BytesIO
from urllib.parse import unquote

import httpx
from PIL import Image as PILImage
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image

from config import Config

logger = logging.getLogger(__name__)


class ImageHandle:
    """A decoded image ready for reportlab"""

    def __init__(self, data, width, height, source=None):
        self.data = data
        self.width = width
        self.height = height
        self.source = source
        self._reader = None

    @classmethod
    def from_bytes(cls, raw, source=None):
        """Decode with Pillow and re-encode as PNG so every format draws the same way"""
        with PILImage.open(BytesIO(raw)) as img:
            img.load()
            mode = 'RGBA' if img.mode in ('RGBA', 'LA', 'P') else 'RGB'
            converted = img.convert(mode)
        out = BytesIO()
        converted.save(out, format='PNG')
        return cls(out.getvalue(), converted.width, converted.height, source)

    @property
    def reader(self):
        """ImageReader for canvas.drawImage"""
        if self._reader is None:
            self._reader = ImageReader(BytesIO(self.data))
        return self._reader

    def flowable(self, width, height):
        """Platypus Image scaled to fit inside width x height"""
        img = Image(BytesIO(self.data), width=self.width, height=self.height)
        img._restrictSize(width, height)
        return img

    def __repr__(self):
        return f'<ImageHandle {self.width}x{self.height} {self.source or ""}>'


class AssetLoader:
    """Loads images by URL or path.

    http(s) URLs are fetched with httpx, data: URIs are decoded in place and
    anything else is treated as a path under STATIC_ROOT (or, when
    ASSET_BASE_URL is set, a root-relative URL on that origin). Every failure
    is logged and returned as None, and results are cached per loader.
    """

    def __init__(self, config=Config, client=None):
        self.config = config
        self.timeout = config.ASSET_TIMEOUT
        self._client = client
        self._cache = {}

    async def load_logo(self):
        """The school logo, or None"""
        return await self.load_image(self.config.LOGO_PATH)

    async def load_image(self, url):
        """Decoded image for url, or None when missing, unreachable or undecodable"""
        if not url:
            return None
        if url in self._cache:
            return self._cache[url]
        try:
            raw = await asyncio.wait_for(self._fetch(url), timeout=self.timeout)
            handle = ImageHandle.from_bytes(raw, source=url)
        except Exception as e:
            logger.warning("Could not load image %s: %s", url, e)
            handle = None
        self._cache[url] = handle
        return handle

    async def load_many(self, urls):
        """Load several images concurrently; returns {url: handle or None}"""
        unique = [url for url in dict.fromkeys(urls) if url]
        handles = await asyncio.gather(*(self.load_image(url) for url in unique))
        return dict(zip(unique, handles))

    async def _fetch(self, url):
        if url.startswith('data:'):
            return self._decode_data_uri(url)
        if url.startswith(('http://', 'https://')):
            return await self._fetch_http(url)
        if url.startswith('/') and self.config.ASSET_BASE_URL:
            return await self._fetch_http(self.config.ASSET_BASE_URL.rstrip('/') + url)
        return await asyncio.to_thread(self._read_file, url)

    async def _fetch_http(self, url):
        if self._client is not None:
            response = await self._client.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.content
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.content

    def _read_file(self, path):
        candidate = path
        if not os.path.isabs(path) or not os.path.exists(path):
            candidate = os.path.join(self.config.STATIC_ROOT, path.lstrip('/'))
        with open(candidate, 'rb') as fh:
            return fh.read()

    @staticmethod
    def _decode_data_uri(uri):
        header, _, payload = uri.partition(',')
        if header.endswith(';base64'):
            return base64.b64decode(payload)
        return unquote(payload).encode('latin-1')
