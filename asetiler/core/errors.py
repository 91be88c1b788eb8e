"""
Exceptions raised by the decode/composite/slice pipeline.
"""


class AsepriteError(ValueError):
    """Base class for documents that cannot be turned into an image."""


class MalformedDocument(AsepriteError):
    """The byte stream does not match the header/frame/chunk structure."""

    def __init__(self, message, offset=None):
        """
        Initialize the error.

        Args:
            message: Human readable description of the problem
            offset: Byte offset where parsing failed (optional)
        """
        if offset is not None:
            message = f"{message} (at byte {offset})"
        super().__init__(message)
        self.offset = offset


class NoFrames(AsepriteError):
    """The document parsed cleanly but holds no frames."""


class InvalidTileSize(ValueError):
    """Tile size must be a positive number of pixels."""
