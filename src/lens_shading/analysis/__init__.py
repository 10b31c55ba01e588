from .gain import CHANNEL_NAMES, CHANNEL_ORDERING, channel_ordering, derive
from .grid import GRID_PITCH, aggregate, grid_shape
from .pipeline import AnalysisResult, LensShadingTable, analyse_buffer, analyse_file, open_file_capture

__all__ = [
    "CHANNEL_NAMES",
    "CHANNEL_ORDERING",
    "channel_ordering",
    "derive",
    "GRID_PITCH",
    "aggregate",
    "grid_shape",
    "AnalysisResult",
    "LensShadingTable",
    "analyse_buffer",
    "analyse_file",
    "open_file_capture",
]
