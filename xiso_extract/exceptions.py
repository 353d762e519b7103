"""
Custom exceptions for the Xbox disc image extraction utility.
"""


class XisoError(Exception):
    """Base exception for all extraction errors."""
    pass


class FormatError(XisoError):
    """Image does not carry a supported volume header."""
    pass


class CorruptImageError(FormatError):
    """Directory structure is inconsistent."""
    pass


class ImageIOError(XisoError):
    """Error seeking or reading the disc image."""
    pass


class LocalFsError(XisoError):
    """Error creating, writing or inspecting a local destination."""
    pass


class RemoteProtocolError(XisoError):
    """Connection, login or unexpected response from the FTP server."""
    pass


class VerificationError(XisoError):
    """Written file does not have the size recorded in the image."""

    def __init__(self, path: str, expected: int, actual: int | None):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"File verification failed. {path!r} is corrupted "
            f"(expected {expected} bytes, found {actual})"
        )
