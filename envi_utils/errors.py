from enum import Enum


class ErrorKind(Enum):
    HEADER_FORMAT = "header_format"
    HEADER_CONSISTENCY = "header_consistency"
    MISSING_DIMENSIONS = "missing_dimensions"
    CHANNEL_OUT_OF_RANGE = "channel_out_of_range"
    UNSUPPORTED_INTERLEAVE = "unsupported_interleave"
    UNSUPPORTED_DATA_TYPE = "unsupported_data_type"
    SIZE_MISMATCH = "size_mismatch"
    NAMING_MISMATCH = "naming_mismatch"


class EnviError(Exception):
    """Base class for every error raised while opening or decoding an ENVI image.

    Each subclass carries a fixed ``kind`` so callers can dispatch on the
    variant without matching class names.
    """

    kind: ErrorKind = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class HeaderFormatError(EnviError, ValueError):
    kind = ErrorKind.HEADER_FORMAT


class HeaderConsistencyError(EnviError, ValueError):
    kind = ErrorKind.HEADER_CONSISTENCY


class MissingDimensionsError(EnviError, ValueError):
    kind = ErrorKind.MISSING_DIMENSIONS


class ChannelOutOfRangeError(EnviError, IndexError):
    kind = ErrorKind.CHANNEL_OUT_OF_RANGE


class UnsupportedInterleaveError(EnviError, ValueError):
    kind = ErrorKind.UNSUPPORTED_INTERLEAVE


class UnsupportedDataTypeError(EnviError, ValueError):
    kind = ErrorKind.UNSUPPORTED_DATA_TYPE


class SizeMismatchError(EnviError, ValueError):
    kind = ErrorKind.SIZE_MISMATCH


class NamingMismatchError(EnviError, ValueError):
    kind = ErrorKind.NAMING_MISMATCH
