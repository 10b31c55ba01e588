from .binary_table import BinaryTable, decode_table, encode_table, read_binary_table, write_binary_table
from .channel_dump import require_tifffile, write_channel_planes
from .header_file import render_header, write_header_file
from .report import AnalysisReport, ChannelSummary, build_report, write_report
from .text_table import render_text_table, write_text_table

__all__ = [
    "BinaryTable",
    "decode_table",
    "encode_table",
    "read_binary_table",
    "write_binary_table",
    "require_tifffile",
    "write_channel_planes",
    "render_header",
    "write_header_file",
    "AnalysisReport",
    "ChannelSummary",
    "build_report",
    "write_report",
    "render_text_table",
    "write_text_table",
]
