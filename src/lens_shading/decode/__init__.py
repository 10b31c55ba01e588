from .base import BufferUnderrunError, ContainerNotFoundError, DecodeError, UnsupportedFormatError
from .bayer import black_level_correct, compute_stride, unpack
from .container import locate, open_capture
from .header import parse, resolve_black_level
from .types import BayerOrder, ChannelPlanes, RawCapture, SensorHeader

__all__ = [
    "BufferUnderrunError",
    "ContainerNotFoundError",
    "DecodeError",
    "UnsupportedFormatError",
    "black_level_correct",
    "compute_stride",
    "unpack",
    "locate",
    "open_capture",
    "parse",
    "resolve_black_level",
    "BayerOrder",
    "ChannelPlanes",
    "RawCapture",
    "SensorHeader",
]
