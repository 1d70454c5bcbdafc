# Infrastructure Adapters Package
from .json_snapshot import JsonSnapshotSource, decode_snapshot
from .pillow_canvas import PillowCanvas, find_font_file

__all__ = ["JsonSnapshotSource", "decode_snapshot", "PillowCanvas", "find_font_file"]
