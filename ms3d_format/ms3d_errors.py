"""Exceptions raised while decoding MS3D files.

Every decode failure is a ValueError subclass so callers that already guard
file parsing with ``except ValueError`` keep working.
"""


class DecodeError(ValueError):
    """Base class for all MS3D decode failures.

    Attributes:
        offset: byte offset in the source where the failure was detected,
            or None when unknown
    """

    def __init__(self, message, offset=None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class TruncatedError(DecodeError):
    """The byte source could not supply the requested span."""

    def __init__(self, requested, available, offset=None):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Unexpected end of data: needed {requested} bytes, got {available}",
            offset,
        )


class FormatError(DecodeError):
    """The data violates a structural rule of the format."""


class InvalidHeaderError(FormatError):

    def __init__(self, expected, actual, offset=None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid MS3D header: expected {expected!r}, got {actual!r}", offset
        )


class UnsupportedVersionError(FormatError):
    """A version or sub-version tag holds a value the reader does not know."""

    def __init__(self, section, actual, supported, offset=None):
        self.section = section
        self.actual = actual
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported {section} {actual} "
            f"(supported: {', '.join(str(v) for v in self.supported)})",
            offset,
        )


class InvalidFlagsError(FormatError):

    def __init__(self, bits, entity, allowed, offset=None):
        self.bits = bits
        self.entity = entity
        self.allowed = allowed
        super().__init__(
            f"Invalid {entity} flags 0x{bits:02x} (allowed mask 0x{int(allowed):02x})",
            offset,
        )


class InvalidCommentCountError(FormatError):

    def __init__(self, category, count, offset=None):
        self.category = category
        self.count = count
        super().__init__(f"Invalid number of {category} comments: {count}", offset)


class StringEncodingError(DecodeError):
    """A string field is not valid UTF-8."""

    def __init__(self, field, raw, offset=None):
        self.field = field
        self.raw = bytes(raw)
        super().__init__(f"Invalid UTF-8 in {field}: {self.raw!r}", offset)
