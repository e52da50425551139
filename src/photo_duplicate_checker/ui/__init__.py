"""UI components for photo duplicate checker.

The tkinter windows are imported from their modules directly so that the
formatting and thumbnail helpers stay usable where tkinter is missing.
"""

from .formatting import DateFormatter, format_progress, format_variants
from .thumbnails import ThumbnailProvider

__all__ = [
    "DateFormatter",
    "ThumbnailProvider",
    "format_progress",
    "format_variants",
]
