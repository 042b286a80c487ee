"""Domain errors raised by the document workflow and generation services.

Each error carries the HTTP status it maps to; ``docflow.main`` registers a
single handler that renders them as ``{"detail": message}``.
"""


class DocflowError(Exception):
    """Base class for domain errors."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DocflowError):
    """Missing or malformed input."""

    status_code = 400


class PermissionDeniedError(DocflowError):
    """The acting principal may not perform the operation."""

    status_code = 403


class NotFoundError(DocflowError):
    """A referenced record does not exist."""

    status_code = 404


class InvalidStateError(DocflowError):
    """The operation is not legal from the document's current status."""

    status_code = 400


class ConcurrentModificationError(InvalidStateError):
    """The document changed between read and conditional write."""

    status_code = 409


class UpstreamAuthError(DocflowError):
    """The generation provider rejected our credentials."""

    status_code = 401
