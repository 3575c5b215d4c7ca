"""Exception hierarchy for the music server.

Every rejection a request can meet is one of these types. Each carries the
HTTP status it maps to, so the API layer can translate them with a single
handler. All custom exceptions inherit from `MusicServerError`.
"""


class MusicServerError(Exception):
    """Base exception for all music server errors."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        context: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.context = context or {}


class InvalidFilenameError(MusicServerError):
    """Raised when a filename does not match the allow-list grammar."""

    status_code = 400
    public_message = "Invalid filename"


class PathTraversalError(MusicServerError):
    """Raised when a filename would escape the media root."""

    status_code = 403
    public_message = "Access denied"


class MediaNotFoundError(MusicServerError):
    """Raised when the requested file cannot be stat'ed or opened."""

    status_code = 404
    public_message = "File not found"


class RangeError(MusicServerError):
    """Base for Range header rejections; both kinds answer 416 with no body."""

    status_code = 416
    public_message = ""

    def __init__(self, message: str, total_size: int, **kwargs):
        super().__init__(message, **kwargs)
        self.total_size = total_size


class RangeNotSatisfiableError(RangeError):
    """Raised when a well-formed range falls outside the file."""


class RangeMalformedError(RangeError):
    """Raised when the Range header cannot be parsed at all."""


class StreamFailureError(MusicServerError):
    """Raised when reading the file fails.

    `headers_sent` tells whether the status line has already gone out; when
    it has, the only remaining option is to abort the body.
    """

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str, headers_sent: bool = False, **kwargs):
        super().__init__(message, **kwargs)
        self.headers_sent = headers_sent
