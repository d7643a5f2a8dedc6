"""Exceptions raised by the SKP core"""


class SKPError(Exception):
    """Base class for recoverable SKP errors"""


class ExtractionError(SKPError):
    """The extraction service was unreachable, timed out or returned unusable content"""


class MergeInProgressError(SKPError):
    """An AI fill is already running for this editing session"""


class NoSignatureError(SKPError):
    """commit() was called on a signature pad without any ink"""


class SignatureTooLargeError(SKPError):
    """The encoded signature image exceeds the configured size cap"""

    def __init__(self, size: int, limit: int):
        super().__init__(f"signature image is {size} bytes, limit is {limit}")
        self.size = size
        self.limit = limit


class SessionClosedError(SKPError):
    """The editing session was already archived"""


class ArchiveCorruptError(SKPError):
    """The archive file exists but could not be read in full; writing would drop records"""
