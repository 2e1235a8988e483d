"""
Error taxonomy shared by all codecs.

Buffer-level codec functions raise CodecError subclasses. The file-level
dispatch in compengine.engine turns them into the negative ErrorCode
carried by a Result, so callers of the dispatch surface never see an
exception for a codec failure.

Positive codes are reserved for host-side system errors and are never
produced here.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Result codes reported by the dispatch surface."""

    OK = 0
    INPUT_ERROR = -1
    OUTPUT_ERROR = -2
    FORMAT_ERROR = -3
    TRUNCATED = -4
    CORRUPT = -5
    UNSUPPORTED_INPUT = -6
    NOT_IMPLEMENTED = -7
    UNKNOWN_ALGORITHM = -99


class CodecError(Exception):
    """Base class for all library-detected failures."""

    code = ErrorCode.FORMAT_ERROR


class InputError(CodecError):
    """Input file missing, unreadable or empty where content is required."""

    code = ErrorCode.INPUT_ERROR


class OutputError(CodecError):
    """Output file could not be written."""

    code = ErrorCode.OUTPUT_ERROR


class FormatError(CodecError):
    """Bad magic or malformed/inconsistent header fields."""

    code = ErrorCode.FORMAT_ERROR


class TruncatedStreamError(CodecError):
    """Payload ends before the extent declared by its header."""

    code = ErrorCode.TRUNCATED


class CorruptStreamError(CodecError):
    """Back-reference out of bounds or prefix-tree walk dead end."""

    code = ErrorCode.CORRUPT


class UnsupportedInputError(CodecError):
    """Image could not be decoded or has an unsupported layout."""

    code = ErrorCode.UNSUPPORTED_INPUT


class UnknownAlgorithmError(CodecError):
    """Algorithm selector does not name a known codec."""

    code = ErrorCode.UNKNOWN_ALGORITHM
