class IsodumpError(Exception):
    """Base class for all isodump errors"""


class BoxDecodeError(IsodumpError):
    """A box header could not be decoded at the given offset"""

    def __init__(self, offset: int, message: str):
        super().__init__(f"{message} at offset {offset}")
        self.offset = offset


class TruncatedHeader(BoxDecodeError):
    """Fewer bytes remain than the header needs (8, or 16 for extended size)"""


class BoxTooShort(BoxDecodeError):
    """Decoded box size is smaller than its own header"""


class InputUnavailable(IsodumpError):
    """The input container could not be loaded or downloaded"""
