"""
Error types for the Suffah school document pipeline
"""


class DocumentError(Exception):
    """Base class for document pipeline errors"""


class InvalidDocumentRequest(DocumentError, ValueError):
    """A view record is missing a required field or carries a bad value"""

    def __init__(self, kind, field, reason=None):
        self.kind = kind
        self.field = field
        self.reason = reason or f"missing required field '{field}'"
        super().__init__(f"{kind} request is invalid: {self.reason}")


class GenerationError(DocumentError):
    """The layout engine failed while composing a document"""

    def __init__(self, kind, reason):
        self.kind = kind
        self.reason = reason
        super().__init__(f"Failed to generate {kind}: {reason}")


class PreviewNotReady(DocumentError):
    """Download requested before the preview finished generating"""
