"""Error taxonomy for content-tree operations."""


class ContentError(Exception):
    """Base class for caller-visible content failures.

    Each subclass carries a stable ``kind`` and the HTTP status it maps to
    at the request boundary.

    Attributes:
        kind: Stable machine-readable error kind.
        status_code: HTTP status used when surfaced over the API.
        message: Human-readable description.
        path: The offending path or name, when there is one.
    """

    kind = "ContentError"
    status_code = 400

    def __init__(self, message: str, path: str | None = None) -> None:
        """Initialize content error.

        Args:
            message: Error description.
            path: The offending path value.
        """
        super().__init__(message)
        self.message = message
        self.path = path


class PathTraversalError(ContentError):
    """Raised when a resolved path escapes its root."""

    kind = "PathTraversal"
    status_code = 400


class InvalidNameError(ContentError):
    """Raised when a bare name smuggles a separator or traversal sequence."""

    kind = "InvalidName"
    status_code = 400


class EntryNotFoundError(ContentError):
    """Raised when an expected post, directory or file is absent."""

    kind = "NotFound"
    status_code = 404


class EntryExistsError(ContentError):
    """Raised when a create or rename target collides with an existing entry."""

    kind = "AlreadyExists"
    status_code = 409


class PayloadTooLargeError(ContentError):
    """Raised when an upload exceeds the configured size cap."""

    kind = "PayloadTooLarge"
    status_code = 413


class TreeTooDeepError(ContentError):
    """Raised when a listing recurses past the depth guard."""

    kind = "TreeTooDeep"
    status_code = 422


class ExternalProcessError(ContentError):
    """Raised when the scaffolder or deploy collaborator fails.

    Attributes:
        output: Diagnostic text captured from the process.
    """

    kind = "ExternalProcessFailed"
    status_code = 500

    def __init__(self, message: str, output: str = "") -> None:
        """Initialize external process error.

        Args:
            message: Error description surfaced to the caller.
            output: Raw diagnostic output captured from the process.
        """
        super().__init__(message)
        self.output = output
