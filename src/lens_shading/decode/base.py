from __future__ import annotations


class DecodeError(RuntimeError):
    pass


class ContainerNotFoundError(DecodeError):
    pass


class UnsupportedFormatError(DecodeError):
    pass


class BufferUnderrunError(DecodeError):
    pass
