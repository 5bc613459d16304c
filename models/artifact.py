"""
Generated document artifact for the Suffah school document pipeline
"""

import logging
import os
from collections import namedtuple

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = 'application/pdf'

DocumentBlob = namedtuple('DocumentBlob', ['data', 'content_type', 'filename'])


class GeneratedArtifact:
    """A finished document: binary, previewable blob, save side-effect, page count"""

    def __init__(self, kind, filename, pdf_bytes, page_count, entity_count=1):
        self.kind = kind
        self.filename = filename
        self._pdf_bytes = bytes(pdf_bytes)
        self.page_count = page_count
        self.entity_count = entity_count

    def to_binary(self):
        """Raw PDF bytes; identical on every call"""
        return self._pdf_bytes

    def to_blob(self):
        """Previewable blob carrying the content type and suggested filename"""
        return DocumentBlob(self._pdf_bytes, PDF_CONTENT_TYPE, self.filename)

    def save(self, target):
        """Write the PDF to a file path, or into a directory under the suggested filename"""
        path = str(target)
        if os.path.isdir(path):
            path = os.path.join(path, self.filename)
        with open(path, 'wb') as fh:
            fh.write(self._pdf_bytes)
        logger.info("Saved %s (%d pages) to %s", self.kind, self.page_count, path)
        return path

    def __len__(self):
        return len(self._pdf_bytes)

    def __repr__(self):
        return f'<GeneratedArtifact {self.filename} pages={self.page_count}>'
