"""
Preview and download controller for generated documents
Runs a generator, holds the artifact, exposes it as a viewable resource and commits the final save
"""

import asyncio
import logging
import os
import tempfile
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from config import Config
from models.artifact import GeneratedArtifact
from models.errors import PreviewNotReady

logger = logging.getLogger(__name__)

IDLE = 'idle'
LOADING = 'loading'
READY = 'ready'
ERROR = 'error'

PREVIEW_STATES = (IDLE, LOADING, READY, ERROR)


@dataclass(frozen=True)
class PreviewSession:
    """Snapshot of the preview dialog; artifact is set only while ready"""

    state: str = IDLE
    zoom_percent: int = Config.PREVIEW_ZOOM_DEFAULT
    artifact: Optional[GeneratedArtifact] = None
    error_message: Optional[str] = None

    @property
    def is_ready(self):
        return self.state == READY


class ViewResource:
    """Temporary file holding a preview blob, addressable by a file:// URI"""

    def __init__(self, path, content_type='application/pdf'):
        self.path = Path(path)
        self.content_type = content_type
        self._released = False

    @classmethod
    def create(cls, artifact, directory=None):
        blob = artifact.to_blob()
        suffix = os.path.splitext(blob.filename)[1] or '.pdf'
        fd, path = tempfile.mkstemp(prefix='preview-', suffix=suffix, dir=directory)
        try:
            with os.fdopen(fd, 'wb') as fh:
                fh.write(blob.data)
        except OSError:
            os.unlink(path)
            raise
        return cls(path, blob.content_type)

    @property
    def uri(self):
        return self.path.resolve().as_uri()

    @property
    def released(self):
        return self._released

    def release(self):
        """Delete the backing file; safe to call more than once"""
        if self._released:
            return
        self._released = True
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass

    def __repr__(self):
        state = 'released' if self._released else 'live'
        return f'<ViewResource {self.path.name} {state}>'


def default_resource_factory(config=Config):
    def factory(artifact):
        return ViewResource.create(artifact, config.PREVIEW_DIR)
    return factory


class DocumentPreviewController:
    """Generator-agnostic preview dialog: idle -> loading -> ready | error.

    ``generate`` is a zero-argument coroutine function returning a
    :class:`GeneratedArtifact`. Generations are serialised by a lock, and
    each open/regenerate/close bumps a request token so a completion that
    is no longer current is dropped without touching the session.
    """

    def __init__(self, generate, filename, title=None, resource_factory=None, config=Config):
        self._generate = generate
        self.filename = filename
        self.title = title or filename
        self.config = config
        self._resource_factory = resource_factory or default_resource_factory(config)
        self._lock = asyncio.Lock()
        self._token = 0
        self._resource = None
        self._session = PreviewSession(zoom_percent=config.PREVIEW_ZOOM_DEFAULT)

    @property
    def session(self):
        return self._session

    @property
    def state(self):
        return self._session.state

    @property
    def resource(self):
        """View-resource for the current artifact, None unless ready"""
        return self._resource

    @property
    def request_token(self):
        return self._token

    @property
    def can_download(self):
        return self._session.state == READY

    def _release_resource(self):
        if self._resource is not None:
            self._resource.release()
            self._resource = None

    async def open(self):
        """Start a fresh preview at the default zoom"""
        return await self._run(self.config.PREVIEW_ZOOM_DEFAULT)

    async def regenerate(self):
        """Drop the current preview and generate again, keeping the zoom level"""
        return await self._run(self._session.zoom_percent)

    async def _run(self, zoom_percent):
        self._token += 1
        token = self._token
        self._release_resource()
        self._session = PreviewSession(LOADING, zoom_percent)
        try:
            async with self._lock:
                return await self._generate_current(token)
        except asyncio.CancelledError:
            if token == self._token:
                self._release_resource()
                self._session = PreviewSession(IDLE, self._session.zoom_percent)
            raise

    async def _generate_current(self, token):
        if token != self._token:
            logger.debug("Skipping superseded preview request %d for %s", token, self.filename)
            return self._session
        try:
            artifact = await self._generate()
            if token != self._token:
                logger.debug("Discarding stale preview result %d for %s", token, self.filename)
                return self._session
            self._resource = self._resource_factory(artifact)
        except Exception as e:
            if token != self._token:
                logger.debug("Discarding failed stale preview request %d for %s", token, self.filename)
                return self._session
            logger.error("Error generating preview for %s: %s", self.filename, e, exc_info=True)
            self._release_resource()
            self._session = replace(self._session, state=ERROR, artifact=None, error_message=str(e))
            return self._session

        self._session = replace(self._session, state=READY, artifact=artifact, error_message=None)
        logger.debug("Preview ready for %s (%d pages)", self.filename, artifact.page_count)
        return self._session

    def close(self):
        """Release the view-resource and return to idle; in-flight results are discarded"""
        self._token += 1
        self._release_resource()
        self._session = PreviewSession(IDLE, self._session.zoom_percent)
        return self._session

    def _set_zoom(self, value):
        value = max(self.config.PREVIEW_ZOOM_MIN, min(self.config.PREVIEW_ZOOM_MAX, value))
        self._session = replace(self._session, zoom_percent=value)
        return value

    def zoom_in(self):
        return self._set_zoom(self._session.zoom_percent + self.config.PREVIEW_ZOOM_STEP)

    def zoom_out(self):
        return self._set_zoom(self._session.zoom_percent - self.config.PREVIEW_ZOOM_STEP)

    def download(self, directory):
        """Save the artifact under the suggested filename, then close the dialog"""
        if not self.can_download:
            raise PreviewNotReady(f'Cannot download {self.filename} while the preview is {self.state}')
        target = Path(directory)
        if target.is_dir():
            target = target / self.filename
        path = Path(self._session.artifact.save(target))
        self.close()
        return path

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()
        return False
