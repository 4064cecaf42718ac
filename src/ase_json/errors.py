from __future__ import annotations


class ASEError(Exception):
    pass


class MissingArgumentError(ASEError):
    pass


class FileReadError(ASEError):
    pass


class FileWriteError(ASEError):
    pass


class ASEParseError(ASEError, ValueError):
    pass


class InvalidSignatureError(ASEParseError):
    pass


class MalformedBlockError(ASEParseError):
    pass


class UnsupportedColorModelError(ASEParseError):
    pass


class UnknownBlockTypeError(ASEParseError):
    pass


class BufferUnderrunError(ASEParseError):
    pass


class OddLengthBufferError(ASEParseError):
    pass


class PreviewLimitError(ASEError):
    pass
